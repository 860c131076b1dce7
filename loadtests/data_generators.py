"""Faker-based data generators for Locust load test scenarios.

Payloads match the camelCase field names the API's Pydantic schemas accept.
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

PLATFORMS = ["ps5", "ps4", "xbox", "nintendo", "pc"]
CONDITIONS = ["new", "like-new", "excellent", "good", "fair"]


def registration_data() -> dict:
    suffix = uuid.uuid4().hex[:8]
    return {
        "name": fake.name(),
        "email": f"{fake.user_name()[:20]}.{suffix}@gamezone.in",
        "phone": f"9{random.randint(100000000, 999999999)}",
        "password": "loadtest123",
    }


def scarce_product_data(stock: int) -> dict:
    price = random.choice([299, 499, 999, 1499])
    return {
        "name": f"Limited Edition {fake.word().title()} {uuid.uuid4().hex[:4]}",
        "description": fake.sentence(nb_words=12),
        "price": price,
        "originalPrice": price * 2,
        "platform": random.choice(PLATFORMS),
        "condition": random.choice(CONDITIONS),
        "stock": stock,
        "tags": ["limited", "loadtest"],
    }


def shipping_address_data() -> dict:
    return {
        "name": fake.name(),
        "phone": f"9{random.randint(100000000, 999999999)}",
        "street": fake.street_address(),
        "city": fake.city(),
        "state": fake.state(),
        "pincode": fake.postcode(),
    }


def checkout_data() -> dict:
    return {
        "shippingAddress": shipping_address_data(),
        "paymentMethod": random.choice(["cod", "upi"]),
    }
