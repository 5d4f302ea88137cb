from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.orders.constants import DeliveryOption, OrderStatus, PaymentMethod
from modules.orders.dtos import AdminOrderUpdateDTO, build_place_order_dto
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories import ProductDjangoRepository
from modules.reviews.dtos import SubmitReviewDTO
from modules.reviews.exceptions import ReviewAlreadyExists
from modules.reviews.repositories.django_repository import ReviewDjangoRepository
from modules.reviews.services import ReviewService
from modules.users.repositories.django_repository import UserDjangoRepository

SEED_BUYERS = [
    ("asha", "9876543210", 29),
    ("ravi", "9123456780", 34),
    ("meera", "9988776655", 41),
    ("kabir", "9012345678", 23),
]

CATALOG = [
    ("SHIRT-001", "Linen Shirt", "Shirts", Decimal("1499.00"), Decimal("1199.00")),
    ("SHIRT-002", "Oxford Shirt", "Shirts", Decimal("1799.00"), None),
    ("TEE-001", "Cotton Crew Tee", "T-Shirts", Decimal("599.00"), Decimal("449.00")),
    ("TEE-002", "Graphic Tee", "T-Shirts", Decimal("699.00"), None),
    ("JEAN-001", "Slim Fit Jeans", "Jeans", Decimal("2299.00"), Decimal("1899.00")),
    ("JEAN-002", "Straight Jeans", "Jeans", Decimal("2099.00"), None),
    ("SHOE-001", "Canvas Sneakers", "Footwear", Decimal("2499.00"), None),
    ("SHOE-002", "Leather Loafers", "Footwear", Decimal("3999.00"), Decimal("3499.00")),
]

STATES = ["Karnataka", "Maharashtra", "Kerala", "Tamil Nadu"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        buyers = self._seed_users()
        products = self._seed_products()
        orders_created, reviews_created = self._seed_orders(buyers, products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(buyers) + 1}, "
                f"products={len(products)}, "
                f"orders={orders_created}, "
                f"reviews={reviews_created}"
            )
        )

    def _seed_users(self) -> list:
        User = get_user_model()
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser(
                "admin",
                email="admin@example.com",
                password="admin123",
                mobile_number="9000000000",
                age=30,
            )
        buyers = []
        for username, mobile_number, age in SEED_BUYERS:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username,
                    email=f"{username}@example.com",
                    password=f"{username}-pass-123",
                    mobile_number=mobile_number,
                    age=age,
                )
            buyers.append(user)
        return buyers

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        for sku, name, category, price, sale_price in CATALOG:
            product, _ = Product.objects.alive().get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "description": f"{name} from the {category.lower()} range.",
                    "category": category,
                    "price": price,
                    "sale_price": sale_price,
                    "sizes": ["S", "M", "L", "XL"],
                    "colors": ["Black", "Navy"],
                    "stock": random.randint(10, 200),
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, buyers: list, products: list[Product]) -> tuple[int, int]:
        """Place orders through the lifecycle service and walk some of them
        to confirmed delivery or cancellation."""
        self.stdout.write("Creating orders...")
        if OrderDjangoRepository().queryset().exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0, 0

        product_repository = ProductDjangoRepository()
        order_service = OrderService(
            order_repository=OrderDjangoRepository(),
            user_repository=UserDjangoRepository(),
            product_repository=product_repository,
        )
        review_service = ReviewService(
            repository=ReviewDjangoRepository(),
            product_repository=product_repository,
            eligibility=order_service,
        )

        orders_created = reviews_created = 0
        for i in range(20):
            buyer = random.choice(buyers)
            picked = random.sample(products, k=random.randint(1, 3))
            items = [
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "price": str(product.effective_price),
                    "quantity": random.randint(1, 3),
                    "image": product.image,
                }
                for product in picked
            ]
            total = sum(Decimal(item["price"]) * item["quantity"] for item in items)
            dto = build_place_order_dto(
                buyer.id,
                {
                    "items": items,
                    "shipping_address": {
                        "person_name": buyer.username.title(),
                        "mobile_number": buyer.mobile_number,
                        "street_address": f"{10 + i} MG Road",
                        "postal_code": f"{560001 + i}",
                        "state": random.choice(STATES),
                    },
                    "payment_method": random.choice(PaymentMethod.values),
                    "total_price": str(total),
                },
            )
            order = order_service.place_order(dto)
            orders_created += 1

            outcome = i % 4
            if outcome == 0:
                order_service.apply_admin_update(
                    order.id,
                    AdminOrderUpdateDTO(
                        status=OrderStatus.DELIVERED,
                        delivery_option=DeliveryOption.STAGE_5,
                        admin_message="Delivered to the doorstep.",
                    ),
                )
                order_service.confirm_received(order.id, buyer_id=buyer.id)
                for product in picked:
                    if _submit_seed_review(review_service, buyer.id, product.id):
                        reviews_created += 1
            elif outcome == 1:
                order_service.cancel_order(order.id, buyer_id=buyer.id)
            elif outcome == 2:
                order_service.apply_admin_update(
                    order.id,
                    AdminOrderUpdateDTO(
                        status=OrderStatus.SHIPPED,
                        delivery_option=DeliveryOption.STAGE_3,
                    ),
                )

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created, reviews_created


def _submit_seed_review(service: ReviewService, user_id, product_id) -> bool:
    try:
        service.submit_review(
            SubmitReviewDTO(
                user_id=user_id,
                product_id=product_id,
                rating=random.randint(3, 5),
                comment="Good fit and quality.",
            )
        )
    except ReviewAlreadyExists:
        return False
    return True
