from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.checkout.permissions import CanOperateRegister
from .exceptions import InvalidAccessCodeError
from .serializers import AuthorizeInputSerializer, AuthorizationTokenSerializer
from .services import verify_pin_or_nfc


@extend_schema(
    request=AuthorizeInputSerializer,
    responses={201: AuthorizationTokenSerializer},
    description="Verify a discount PIN or staff NFC tag and issue a single-use token.",
    tags=['camp'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, CanOperateRegister])
def authorize(request):
    """
    Exchange a PIN/NFC code for an authorization token.

    POST /api/camp/access/authorize/
    Body: {"code": "1234"}
    """
    input_serializer = AuthorizeInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        token = verify_pin_or_nfc(
            code=input_serializer.validated_data['code'],
            issued_to=request.user,
        )
    except InvalidAccessCodeError as e:
        return Response(
            {'error': 'invalid_access_code', 'message': str(e), 'status': 403},
            status=status.HTTP_403_FORBIDDEN
        )

    return Response(
        AuthorizationTokenSerializer(token).data,
        status=status.HTTP_201_CREATED
    )
