"""Unit tests for product validation, the service layer and the in-memory store."""

import pytest

from catalog_api.adapters.products import InMemoryProductStore
from catalog_api.core.errors import NotFoundAppError, ValidationAppError
from catalog_api.schemas.products import ProductCreate, ProductUpdate
from catalog_api.services.product_service import ProductService, validate_product_data


@pytest.fixture
def service() -> ProductService:
    return ProductService(InMemoryProductStore(), max_page_size=5, default_page_size=2)


class TestValidateProductData:
    def test_valid_payload(self) -> None:
        assert validate_product_data({"name": "Lamp", "price": "10"}) == []

    def test_blank_fields_are_missing(self) -> None:
        errors = validate_product_data({"name": "   ", "price": ""})

        assert errors == ["name is required", "price is required"]

    @pytest.mark.parametrize("price", ["-1", "1.234", "abc", "1,50"])
    def test_bad_prices(self, price: str) -> None:
        assert validate_product_data({"name": "Lamp", "price": price}) == ["Price must be a valid number"]

    @pytest.mark.parametrize("price", ["", "   "])
    def test_blank_price_on_update_is_invalid(self, price: str) -> None:
        assert validate_product_data({"price": price}, required_fields=()) == ["Price must be a valid number"]

    def test_no_required_fields_for_updates(self) -> None:
        assert validate_product_data({}, required_fields=()) == []


class TestProductService:
    def test_name_that_sanitizes_to_nothing_is_rejected(self, service: ProductService) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            service.create_product(ProductCreate(name="<b></b>", price="1.00"))

        assert exc_info.value.details == {"errors": ["name is required"]}

    def test_pagination_defaults_and_bounds(self, service: ProductService) -> None:
        for i in range(7):
            service.create_product(ProductCreate(name=f"P{i}", price="1"))

        default_page = service.list_products(search=None, page=None, limit=None)
        assert len(default_page["products"]) == 2
        assert default_page["pagination"]["total_pages"] == 4

        capped = service.list_products(search=None, page=0, limit=50)
        assert capped["pagination"]["current_page"] == 1
        assert capped["pagination"]["items_per_page"] == 5

        past_end = service.list_products(search=None, page=10, limit=5)
        assert past_end["products"] == []

    def test_blank_search_lists_everything(self, service: ProductService) -> None:
        service.create_product(ProductCreate(name="Lamp", price="1"))

        result = service.list_products(search="   ", page=1, limit=5)

        assert result["pagination"]["total_items"] == 1

    def test_update_ignores_blank_name(self, service: ProductService) -> None:
        product = service.create_product(ProductCreate(name="Lamp", price="1"))

        updated = service.update_product(product.id, ProductUpdate(name="  ", category="Home"))

        assert updated.name == "Lamp"
        assert updated.category == "Home"
        assert updated.updated_at >= product.updated_at

    def test_update_validates_price(self, service: ProductService) -> None:
        product = service.create_product(ProductCreate(name="Lamp", price="1"))

        with pytest.raises(ValidationAppError):
            service.update_product(product.id, ProductUpdate(price="free"))

    def test_get_missing(self, service: ProductService) -> None:
        with pytest.raises(NotFoundAppError) as exc_info:
            service.get_product(1)

        assert exc_info.value.code == "product_not_found"


class TestInMemoryProductStore:
    def test_returned_products_are_copies(self) -> None:
        store = InMemoryProductStore()
        product = store.create(name="Lamp", price=1.0)

        product.name = "Changed"

        assert store.get(product.id).name == "Lamp"

    def test_ids_are_not_reused(self) -> None:
        store = InMemoryProductStore()
        first = store.create(name="A", price=1.0)
        store.delete(first.id)

        assert store.create(name="B", price=1.0).id == first.id + 1
        assert store.count() == 1
