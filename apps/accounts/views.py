import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import RegisterSerializer, RoleTokenObtainPairSerializer, UserSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """Create a customer or dealer account and issue an initial JWT pair."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        refresh = RoleTokenObtainPairSerializer.get_token(user)
        logger.info('Registered %s user %s', user.role, user.username)
        return Response(
            {
                'user': UserSerializer(user).data,
                'access': str(refresh.access_token),
                'refresh': str(refresh),
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(TokenObtainPairView):
    """POST username + password → {access, refresh, user}."""
    serializer_class = RoleTokenObtainPairSerializer
