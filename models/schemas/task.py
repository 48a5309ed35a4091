from marshmallow import Schema, fields, pre_load, validate, validates_schema, ValidationError, EXCLUDE

from models.task import TASK_STATUSES

STATUS_ERROR = f"Status must be one of: {', '.join(TASK_STATUSES)}"


def _trim_strings(data, keys):
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for key in keys:
        if isinstance(data.get(key), str):
            data[key] = data[key].strip()
    return data


class TaskCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(
        required=True,
        validate=validate.Length(min=1, max=200, error="Title must be between 1 and 200 characters"),
        error_messages={"required": "Title is required"},
    )
    description = fields.String(
        allow_none=True,
        validate=validate.Length(max=1000, error="Description must be less than 1000 characters"),
    )
    status = fields.String(load_default="pending", validate=validate.OneOf(TASK_STATUSES, error=STATUS_ERROR))

    @pre_load
    def _trim(self, data, **kwargs):
        return _trim_strings(data, ("title", "description"))


class TaskUpdateSchema(Schema):
    # All optional, but at least one must be present
    class Meta:
        unknown = EXCLUDE

    title = fields.String(validate=validate.Length(min=1, max=200, error="Title must be between 1 and 200 characters"))
    description = fields.String(
        allow_none=True,
        validate=validate.Length(max=1000, error="Description must be less than 1000 characters"),
    )
    status = fields.String(validate=validate.OneOf(TASK_STATUSES, error=STATUS_ERROR))

    @pre_load
    def _trim(self, data, **kwargs):
        return _trim_strings(data, ("title", "description"))

    @validates_schema
    def _require_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided for update")


class TaskOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    status = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
