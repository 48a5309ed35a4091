from marshmallow import Schema, fields, pre_load, validate, EXCLUDE


def _strip(v):
    return v.strip() if isinstance(v, str) else v


PASSWORD_PATTERN = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)"


class UserRegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={"required": "Email is required"})
    password = fields.String(
        required=True,
        load_only=True,
        validate=[
            validate.Length(min=8, max=128, error="Password must be between 8 and 128 characters long"),
            validate.Regexp(
                PASSWORD_PATTERN,
                error="Password must contain at least one uppercase letter, one lowercase letter, and one number",
            ),
        ],
        error_messages={"required": "Password is required"},
    )

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _strip(data["email"])
        return data


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={"required": "Email is required"})
    password = fields.String(required=True, load_only=True, error_messages={"required": "Password is required"})

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _strip(data["email"])
        return data


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    created_at = fields.DateTime()
