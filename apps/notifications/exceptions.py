"""
Exceptions raised by the reminder engine.
"""


class NotFound(Exception):
    """A referenced task or reminder does not exist."""


class TaskNotFound(NotFound):

    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f'Task {task_id} not found')


class ReminderNotFound(NotFound):

    def __init__(self, reminder_id):
        self.reminder_id = reminder_id
        super().__init__(f'Reminder {reminder_id} not found')


class DeliveryFailure(Exception):
    """Transport error or timeout inside a delivery channel."""


class CycleAlreadyRunning(Exception):
    """Another evaluation cycle holds the single-flight lock."""
