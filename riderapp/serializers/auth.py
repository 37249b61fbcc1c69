from rest_framework import serializers

LOGIN_REQUIRED_MESSAGE = "Please enter both email and password"
RESET_REQUIRED_MESSAGE = "Please fill all fields"


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(
        max_length=255,
        error_messages={'required': LOGIN_REQUIRED_MESSAGE, 'blank': LOGIN_REQUIRED_MESSAGE}
    )
    password = serializers.CharField(
        max_length=255,
        trim_whitespace=False,
        error_messages={'required': LOGIN_REQUIRED_MESSAGE, 'blank': LOGIN_REQUIRED_MESSAGE}
    )


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.CharField(
        max_length=255,
        error_messages={
            'required': "Please enter your email to reset password",
            'blank': "Please enter your email to reset password",
        }
    )


class ResetPasswordSerializer(serializers.Serializer):
    """
    Input serializer for applying a password reset token.
    """

    token = serializers.CharField(
        error_messages={'required': RESET_REQUIRED_MESSAGE, 'blank': RESET_REQUIRED_MESSAGE}
    )
    new_password = serializers.CharField(
        trim_whitespace=False,
        error_messages={'required': RESET_REQUIRED_MESSAGE, 'blank': RESET_REQUIRED_MESSAGE}
    )
    confirm_password = serializers.CharField(
        trim_whitespace=False,
        error_messages={'required': RESET_REQUIRED_MESSAGE, 'blank': RESET_REQUIRED_MESSAGE}
    )

    def validate(self, data):
        if data['new_password'] != data['confirm_password']:
            raise serializers.ValidationError({
                'confirm_password': 'Passwords do not match'
            })
        return data
