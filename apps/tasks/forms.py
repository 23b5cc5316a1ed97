"""
Forms for tasks app.

Used by the JSON API to validate and convert request payloads:
- TaskForm: Create tasks
- TaskUpdateForm: Partial updates, including status changes
"""

from django import forms

from .models import Task


def flatten_assignee(data):
    """
    Accept the assignee either as flat fields or as a nested object:
    ``{"assignee": {"name": ..., "email": ..., "chat_id": ...}}``.
    """
    data = dict(data)
    assignee = data.pop('assignee', None)
    if isinstance(assignee, dict):
        for key, field in (('name', 'assignee_name'), ('email', 'assignee_email'), ('chat_id', 'assignee_chat_id')):
            if key in assignee and field not in data:
                data[field] = assignee[key]
    return data


class TaskForm(forms.ModelForm):
    """
    Form for creating tasks.

    Priority is optional: when it is left out the service layer infers it
    from the description.
    """

    class Meta:
        model = Task
        fields = [
            'title', 'description', 'assignee_name', 'assignee_email',
            'assignee_chat_id', 'priority', 'due_date',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['priority'].required = False
        self.fields['title'].help_text = 'Brief, descriptive title for the task'

    def clean_title(self):
        title = self.cleaned_data.get('title', '').strip()
        if not title:
            raise forms.ValidationError('Task title cannot be empty')
        return title


class TaskUpdateForm(forms.Form):
    """
    Partial task update. Every field is optional; the view only applies
    the fields present in the request.
    """
    title = forms.CharField(max_length=255, required=False)
    description = forms.CharField(required=False)
    assignee_name = forms.CharField(max_length=150, required=False)
    assignee_email = forms.EmailField(required=False)
    assignee_chat_id = forms.CharField(max_length=100, required=False)
    priority = forms.ChoiceField(choices=Task.Priority.choices, required=False)
    status = forms.ChoiceField(choices=Task.Status.choices, required=False)
    due_date = forms.DateTimeField(required=False)

    def changes(self):
        """Cleaned values for the fields actually sent."""
        return {
            name: value for name, value in self.cleaned_data.items()
            if name in self.data
        }
