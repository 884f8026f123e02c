from django.core.exceptions import ValidationError

from ..exceptions import NotFound


def get_object(model, pk, entity=None, queryset=None):
    """
    Fetch one row by primary key or raise NotFound.

    Ids arrive as opaque strings; one that is not even a valid key
    ("abc" for an integer column) is simply not found.
    """
    entity = entity or model._meta.verbose_name.capitalize()
    qs = queryset if queryset is not None else model._default_manager.all()
    try:
        return qs.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError, ValidationError):
        raise NotFound(entity, pk)
