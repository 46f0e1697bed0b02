"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's validation rules and
match the field names expected by the Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

BRANDS = ["Maison Arlette", "Valmont", "Horlogerie Bessé", "Atelier Noor", "Casa Ferri"]
CATEGORIES = ["bags", "leather", "outerwear", "cashmere", "silk", "accessories", "watches", "shoes"]
GENDERS = ["women", "men", "unisex"]

# ---------- Identity ----------


def valid_email() -> str:
    """Unique per call so repeated registrations never collide."""
    local = fake.user_name()[:20]
    domain = fake.free_email_domain()
    return f"{local}.{uuid.uuid4().hex[:6]}@{domain}"


def registration_data() -> dict:
    """Generate RegisterRequest payload."""
    return {
        "email": valid_email(),
        "name": fake.name()[:120],
        "password": fake.password(length=14),
    }


# ---------- Catalogue ----------


def product_data(stock: int | None = None) -> dict:
    """Generate CreateProductRequest payload."""
    noun = random.choice(["Tote", "Coat", "Carré", "Chronograph", "Loafers", "Clutch", "Scarf"])
    return {
        "name": f"{fake.word().capitalize()} {noun}"[:200],
        "brand": random.choice(BRANDS),
        "gender": random.choice(GENDERS),
        "categories": random.sample(CATEGORIES, k=2),
        "price": f"{random.randint(250, 15000)}.00",
        "discount_percent": random.choice([0, 0, 0, 10, 15, 20]),
        "stock": random.randint(1, 40) if stock is None else stock,
        "description": fake.sentence(nb_words=12),
        "images": [f"https://cdn.example.com/images/{uuid.uuid4().hex}.jpg"],
    }


def browse_filters() -> dict:
    """Random query parameters for GET /api/products."""
    params = {"sort": random.choice(["newest", "price_asc", "price_desc", "name"])}
    if random.random() < 0.5:
        params["gender"] = random.choice(GENDERS)
    if random.random() < 0.3:
        params["category"] = random.choice(CATEGORIES)
    if random.random() < 0.2:
        params["in_stock"] = "true"
    return params


# ---------- Ordering ----------


def cart_quantity() -> int:
    return random.choice([1, 1, 1, 2, 3])
