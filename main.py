import sys
import logging

from souvy.core.app import App
from souvy.core.catalog import CATALOG_PRODUCTS, find_product
from souvy.core.state import APP_TITLE, CUSTOMIZATIONS_PATH, LOGS_PATH
from souvy.core.storage import load_customization
from souvy.screens.editor import EditorScreen

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="[%(asctime)s %(name)s] [%(levelname)s] %(message)s")
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.INFO)
    file_handler = logging.FileHandler(LOGS_PATH / "souvy.log", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("[%(asctime)s %(name)s] [%(levelname)s] %(message)s"))
    logging.getLogger().addHandler(file_handler)

    product = find_product(sys.argv[1]) if len(sys.argv) > 1 else CATALOG_PRODUCTS[0]
    if product is None:
        sys.exit(f"Unknown product id: {sys.argv[1]}")
    app = App(title=APP_TITLE)
    app.show_screen(
        EditorScreen,
        product=product,
        initial=load_customization(CUSTOMIZATIONS_PATH / f"{product.id}.json"),
    )
    app.mainloop()
