"""Review API views.

Anyone may read a product's reviews; submitting one requires an
authenticated buyer with a confirmed delivery of the product.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, BasePermission, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.exceptions import ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.reviews.dtos import build_submit_review_dto
from modules.reviews.exceptions import (
    InvalidReviewData,
    NotEligibleForReview,
    ReviewAlreadyExists,
)
from modules.reviews.models import Review
from modules.reviews.repositories.django_repository import ReviewDjangoRepository
from modules.reviews.serializers import ReviewSerializer
from modules.reviews.services import ReviewService
from modules.users.repositories.django_repository import UserDjangoRepository


class ReviewViewSet(GenericViewSet):
    queryset = Review.objects.all()
    serializer_class = ReviewSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        product_repository = ProductDjangoRepository()
        self._service = ReviewService(
            repository=ReviewDjangoRepository(),
            product_repository=product_repository,
            eligibility=OrderService(
                order_repository=OrderDjangoRepository(),
                user_repository=UserDjangoRepository(),
                product_repository=product_repository,
            ),
        )

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "list":
            return [AllowAny()]
        return [IsAuthenticated()]

    def list(self, request: Request) -> Response:
        """GET /api/v1/reviews/?product=<id>"""
        product_id = request.query_params.get("product")
        if not product_id:
            return Response(
                {"detail": "Query parameter 'product' is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        reviews = self._service.list_reviews(product_id)

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(reviews, request)
        serializer = ReviewSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/reviews/

        The reviewer is always the authenticated caller.
        """
        try:
            dto = build_submit_review_dto(request.user.id, request.data)
            review = self._service.submit_review(dto)
        except InvalidReviewData as exc:
            return Response(
                {"detail": "Invalid review data.", "errors": exc.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except ProductNotFound:
            return Response(
                {"detail": "Product not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except ReviewAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except NotEligibleForReview as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)

        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)
