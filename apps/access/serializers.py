from rest_framework import serializers

from .models import AuthorizationToken


class AuthorizeInputSerializer(serializers.Serializer):
    """
    Validate input for a PIN/NFC authorization.

    Fields:
        code (str): PIN typed on the register or NFC code scanned
    """

    code = serializers.CharField(max_length=128, trim_whitespace=True)


class AuthorizationTokenSerializer(serializers.ModelSerializer):
    """Token handed back to the register after a successful check."""

    class Meta:
        model = AuthorizationToken
        fields = ['token', 'method', 'expires_at']
        read_only_fields = fields
