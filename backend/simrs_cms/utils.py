import csv
from django.http import HttpResponse


def resolve_attr(obj, path):
    """Follow a dotted attribute path ("location.name"), returning "" on a None link."""
    val = obj
    for part in path.split('.'):
        if val is None:
            return ""
        val = getattr(val, part, "")
        if callable(val):
            val = val()
    return "" if val is None else val


def export_to_csv(queryset, filename, fields, headers=None):
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}.csv"'

    writer = csv.writer(response)
    writer.writerow(headers or fields)

    for obj in queryset:
        writer.writerow([resolve_attr(obj, field) for field in fields])

    return response
