from rest_framework import status, permissions
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from django_ratelimit.decorators import ratelimit
from django.utils.decorators import method_decorator
from .serializers import UserSerializer, LoginSerializer
from .utils import api_response
import logging

logger = logging.getLogger(__name__)


@method_decorator(ratelimit(key='ip', rate='10/h', method='POST', block=True), name='dispatch')
class LoginView(APIView):
    """View for user login with JWT"""

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)

        if serializer.is_valid():
            user = serializer.validated_data['user']

            # Generate JWT tokens
            refresh = RefreshToken.for_user(user)
            refresh['role'] = user.role

            response_data = {
                'user': UserSerializer(user).data,
                'tokens': {
                    'refresh': str(refresh),
                    'access': str(refresh.access_token),
                },
            }
            logger.info("User %s logged in", user.id)

            return api_response(
                success=True,
                message='Login successful.',
                data=response_data,
                status=status.HTTP_200_OK
            )

        return api_response(
            success=False,
            message='Login failed.',
            errors=serializer.errors,
            error='VALIDATION_ERROR',
            status=status.HTTP_400_BAD_REQUEST
        )


class UserProfileView(APIView):
    """Return the authenticated user's identity and role"""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return api_response(
            success=True,
            message='Profile retrieved successfully.',
            data=UserSerializer(request.user).data,
            status=status.HTTP_200_OK
        )
