from storefront.data.models import CouponModel, ProductModel, UserModel
from storefront.data.seed import COUPONS, PRODUCTS, seed


class TestSeed:
    def test_seeds_empty_database(self, db):
        assert seed(db) is True

        assert db.query(ProductModel).count() == len(PRODUCTS)
        assert db.query(CouponModel).count() == len(COUPONS)
        assert db.get(UserModel, 1) is not None

    def test_leaves_existing_data(self, db, make_product):
        make_product()
        assert seed(db) is False
        assert db.query(ProductModel).count() == 1
