from typing import List, Optional

from souvy.canvas.object import Product

CATALOG_PRODUCTS: List[Product] = [
    Product(
        id="kettle-01",
        name="Metropolitan Kettle",
        category="Home & Living",
        price=125,
        image="https://simsng.com/storage/2024/05/RPEK-016W_04.jpg",
        description="Royal 1.7L Electric Kettle",
    ),
    Product(
        id="tote-01",
        name="Tote Bag",
        category="Lifestyle",
        price=65,
        image="https://mockuptree.com/wp-content/uploads/edd/2024/04/tote-bag-mockup-psd.jpg",
        description="Spacious tote featuring traditional motifs and reinforced handles.",
    ),
    Product(
        id="box-01",
        name="Premium Gift Box",
        category="Events",
        price=150,
        image="https://instamart-media-assets.swiggy.com/swiggy/image/upload/fl_lossy,f_auto,q_auto/NI_CATALOG/IMAGES/CIW/2025/1/12/716d41cf-fa07-4de9-b11b-33e56499399f_366713_1.png",
        description="A curated selection of artisanal treats and lifestyle essentials.",
    ),
]


def find_product(product_id: str) -> Optional[Product]:
    for p in CATALOG_PRODUCTS:
        if p.id == product_id:
            return p
    return None
