"""User API views.

Signup is public; listing and deletion are staff-only; a user may read
their own record.  Tokens are issued by SimpleJWT (``auth/token/``).
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny, BasePermission, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.users.dtos import build_signup_dto
from modules.users.exceptions import (
    InvalidUserData,
    UserAlreadyExists,
    UserHasOrders,
    UserNotFound,
)
from modules.users.filters import UserFilter
from modules.users.repositories.django_repository import UserDjangoRepository
from modules.users.serializers import UserSerializer
from modules.users.services import UserService


class UserViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for user registration and administration."""

    filterset_class = UserFilter
    search_fields = ["username", "email"]
    ordering_fields = ["username", "date_joined"]
    ordering = ["username"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = get_user_model().objects.all()
    serializer_class = UserSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = UserService(repository=UserDjangoRepository())

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "signup":
            return [AllowAny()]
        if self.action == "retrieve":
            return [IsAuthenticated()]
        return [IsAdminUser()]

    @action(detail=False, methods=["post"])
    def signup(self, request: Request) -> Response:
        """POST /api/v1/users/signup/"""
        try:
            dto = build_signup_dto(request.data)
            user = self._service.register(dto)
        except InvalidUserData as exc:
            return Response(
                {"detail": "Invalid user data.", "errors": exc.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except UserAlreadyExists as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_409_CONFLICT,
            )

        out = UserSerializer(user)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/users/{pk}/  (self or staff)"""
        if not request.user.is_staff and str(request.user.id) != str(pk):
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        try:
            user = self._service.get_user(pk)
        except UserNotFound:
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(UserSerializer(user).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/users/{pk}/"""
        try:
            self._service.delete_user(pk)
        except UserNotFound:
            return Response(
                {"detail": "User not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except UserHasOrders as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def me(request: Request) -> Response:
    """GET /api/v1/me"""
    return Response(UserSerializer(request.user).data)
