from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Length, Email, Regexp, ValidationError


class JSONForm(FlaskForm):
    """FlaskForm fed from a JSON body. The API is exempt from CSRF."""

    class Meta:
        csrf = False

    def first_error(self):
        for field in self:
            if field.errors:
                return field.errors[0]
        return "Invalid request"


def _as_text(value):
    # JSON bodies may carry numbers or booleans where a string belongs
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _strip(value):
    value = _as_text(value)
    return value.strip() if value is not None else value


class SignupForm(JSONForm):
    username = StringField(
        "Username",
        filters=[_strip],
        validators=[
            DataRequired(message="Username, email, and password are required"),
            Length(min=3, max=50, message="Username must be between 3 and 50 characters"),
            Regexp(r"^[A-Za-z0-9_.-]+$", message="Username may only contain letters, numbers, '.', '-' and '_'"),
        ],
    )
    email = StringField(
        "Email",
        filters=[_strip],
        validators=[
            DataRequired(message="Username, email, and password are required"),
            Email(),
            Length(max=120),
        ],
    )
    password = PasswordField(
        "Password",
        filters=[_as_text],
        validators=[
            DataRequired(message="Username, email, and password are required"),
            Length(min=4, message="Password must be at least 4 characters"),
        ],
    )

    def validate_password(self, field):
        if not field.data or not field.data.strip():
            raise ValidationError("Password cannot be blank or only whitespace.")


class SigninForm(JSONForm):
    identifier = StringField("Username", filters=[_strip], validators=[DataRequired(message="Username is required")])
    password = PasswordField("Password", filters=[_as_text], validators=[DataRequired(message="Password is required")])
