"""
Bundled weekly menu, loaded by `manage.py load_weekly_menu`.

WEEKLY_MENU maps a weekday number (Monday=0) to its categories; each
category lists menu item definitions in display order.
"""

from decimal import Decimal

IMAGE_BASE = "https://res.cloudinary.com/dp7dtmzb2/image/upload/v1771369139"

MUSHROOM_SWAP = {
    "label": "Make it vegetarian?",
    "instructions": "Replace protein with mushrooms",
}

WEEKLY_MENU = {
    0: [
        {
            "category_name": "Daily Selection",
            "items": [
                {
                    "code": "m-med-chicken",
                    "name": "Mediterranean Chicken",
                    "description": "Brown rice & quinoa mix, Mediterranean chicken breast, leafy greens, "
                                   "cucumber, tomato, and a Tahini-Lemon dressing.",
                    "price": Decimal("12.90"),
                    "image_url": f"{IMAGE_BASE}/MEDITERRANEAN_CHICKEN_iobysa.png",
                    "tags": ["High-Protein", "Fresh"],
                    "woo_product_id": 1360,
                    "customization_options": {
                        "bases": ["Brown rice and quinoa mix", "No rice mix"],
                        "sauces": ["Tahini-Lemon dressing", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": ["No leafy greens", "No cucumber", "No tomato"],
                    },
                },
                {
                    "code": "m-bb-bump",
                    "name": "BIBI Bump Rice",
                    "description": "Brown rice, Korean-marinated beef, sautéed mushrooms, carrots, zucchini, "
                                   "and a bold gochujang sauce.",
                    "price": Decimal("15.90"),
                    "image_url": f"{IMAGE_BASE}/BIBI_BAMP_RICE_kczybg.png",
                    "tags": ["Nutritious", "Balanced"],
                    "woo_product_id": 1185,
                    "customization_options": {
                        "bases": ["Brown rice", "White rice", "No rice"],
                        "sauces": ["Gochujang sauce", "Soy sauce", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": ["No mushrooms", "No carrots", "No zucchini"],
                    },
                },
            ],
        },
    ],
    1: [
        {
            "category_name": "Daily Selection",
            "items": [
                {
                    "code": "t-carne-asada",
                    "name": "Carne Asada",
                    "description": "Brown rice, Mexican-marinated steak, bell peppers, corn, red onion, "
                                   "black beans, and our Chilanga sauce.",
                    "price": Decimal("15.90"),
                    "image_url": f"{IMAGE_BASE}/CARNE_ASADA_lfjnlg.png",
                    "tags": ["Premium", "Steak"],
                    "woo_product_id": 1449,
                    "customization_options": {
                        "bases": ["Brown rice", "White rice", "No rice"],
                        "sauces": ["Chilanga sauce", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": ["No bell peppers", "No red onion", "No corn", "No black beans"],
                    },
                },
                {
                    "code": "t-chicken-lime",
                    "name": "Chicken Lime",
                    "description": "Quinoa, marinated chicken breast, leafy greens, corn, red onion, tomato, "
                                   "and a creamy lemon dressing.",
                    "price": Decimal("12.90"),
                    "image_url": f"{IMAGE_BASE}/CHICKEN_LIME_rtggkr.png",
                    "tags": ["Light", "Zesty"],
                    "woo_product_id": 1450,
                    "customization_options": {
                        "bases": ["Quinoa", "No quinoa"],
                        "sauces": ["Lemon creamy dressing", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": ["No leafy greens", "No corn", "No red onion", "No tomato"],
                    },
                },
            ],
        },
    ],
    2: [
        {
            "category_name": "Daily Selection",
            "items": [
                {
                    "code": "w-pesto-pasta",
                    "name": "Chicken Pesto Pasta",
                    "description": "Fusilli/rotini, shredded chicken breast, mushrooms, capers, pine nuts, "
                                   "and a creamy pesto sauce.",
                    "price": Decimal("15.90"),
                    "image_url": f"{IMAGE_BASE}/CHICKEN_PESTO_PASTA_b8flzw.png",
                    "tags": ["Italian", "Comfort"],
                    "woo_product_id": 1452,
                    "customization_options": {
                        "bases": ["Traditional pasta"],
                        "sauces": ["Creamy pesto sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": ["No mushrooms", "No capers", "No pine nuts"],
                    },
                },
                {
                    "code": "w-thai-beef",
                    "name": "Thai Beef Salad",
                    "description": "Quinoa, Thai-marinated steak, leafy greens, basil, mint, radish, cucumber, "
                                   "red onion, chopped peanuts, Thai dressing.",
                    "price": Decimal("15.90"),
                    "image_url": f"{IMAGE_BASE}/THAI_BEEF_SALAD_ktgza9.png",
                    "tags": ["Spicy", "Thai"],
                    "woo_product_id": 1455,
                    "customization_options": {
                        "bases": ["Quinoa", "No quinoa"],
                        "sauces": ["Thai dressing", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": [
                            "No leafy greens", "No basil", "No mint", "No radish",
                            "No cucumber", "No red onion", "No peanuts",
                        ],
                    },
                },
            ],
        },
    ],
    3: [
        {
            "category_name": "Daily Selection",
            "items": [
                {
                    "code": "th-milanesa",
                    "name": "Milanesa",
                    "description": "Brown rice, milanesa chicken breast, carrot, zucchini, mushrooms, "
                                   "jalapeño mayo sauce.",
                    "price": Decimal("12.90"),
                    "image_url": f"{IMAGE_BASE}/MILANESA_kqpck6.png",
                    "tags": ["Crispy", "Classic"],
                    "woo_product_id": 1456,
                    "customization_options": {
                        "bases": ["Brown rice", "White rice", "No rice"],
                        "sauces": ["Jalapeño mayo", "Homemade mayo", "No sauce"],
                        "dislikes": ["No carrot", "No zucchini", "No mushrooms"],
                    },
                },
                {
                    "code": "th-meatballs",
                    "name": "Harissa Meatballs",
                    "description": "Quinoa, harissa meatballs, leafy greens, cucumber, radish, pickled red onions, "
                                   "feta cheese, creamy Mediterranean dressing.",
                    "price": Decimal("15.90"),
                    "image_url": f"{IMAGE_BASE}/HARISSA_MEATBALLS_gakt0h.png",
                    "tags": ["Mediterranean", "Spicy"],
                    "woo_product_id": 1459,
                    "customization_options": {
                        "bases": ["Quinoa", "No quinoa"],
                        "sauces": ["Creamy Mediterranean sauce", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": [
                            "No leafy greens", "No cucumbers", "No radish",
                            "No pickled red onions", "No feta cheese",
                        ],
                    },
                },
            ],
        },
    ],
    4: [
        {
            "category_name": "Daily Selection",
            "items": [
                {
                    "code": "f-korean-chicken",
                    "name": "Crispy Korean Chicken",
                    "description": "Brown rice, crispy Korean chicken breast, glazed red cabbage, zucchini, carrot, "
                                   "red onion, gochujang sauce.",
                    "price": Decimal("12.90"),
                    "image_url": f"{IMAGE_BASE}/CRISPY_KOREAN_CHICKEN_khpm4p.png",
                    "tags": ["Korean", "Crispy"],
                    "woo_product_id": 1460,
                    "customization_options": {
                        "bases": ["Brown rice", "White rice", "No rice"],
                        "sauces": ["Gochujang sauce", "Soy sauce", "No sauce"],
                        "dislikes": ["No red cabbage", "No zucchini", "No carrot", "No red onion"],
                    },
                },
                {
                    "code": "f-caesar-salad",
                    "name": "Chicken Caesar Salad",
                    "description": "Fusilli/rotini, curly kale, marinated chicken breast, paprika-roasted chickpeas, "
                                   "parmesan cheese, creamy lemon dressing.",
                    "price": Decimal("12.90"),
                    "image_url": f"{IMAGE_BASE}/CHICKEN_CESAR_SALAD_vbyfrr.png",
                    "tags": ["Classic", "Fresh"],
                    "is_popular": True,
                    "woo_product_id": 1463,
                    "customization_options": {
                        "bases": ["Traditional pasta", "No pasta"],
                        "sauces": ["Creamy lemon dressing", "No sauce"],
                        "has_vegetarian_option": MUSHROOM_SWAP,
                        "dislikes": ["No chickpeas", "No parmesan cheese", "Replace curly kale for leafy greens"],
                    },
                },
            ],
        },
    ],
}
