"""Management command to seed the standard site pages."""

from django.core.management.base import BaseCommand

from django_page_blocks.documents import BlockInstance, PageDocument, generate_block_id
from django_page_blocks.store import DocumentStore


PAGES_CONFIG = [
    {
        "page_key": "home_page",
        "seo_title": "Wholesale supply for retail and hospitality",
        "seo_description": "Reliable wholesale deliveries, a wide catalog and fair prices for businesses.",
        "blocks": [
            {
                "type": "hero",
                "data": {
                    "title": "Wholesale supply you can rely on",
                    "subtitle": "A wide catalog, fixed delivery windows and one manager for every account",
                    "cta_text": "View products",
                    "cta_href": "/products",
                },
            },
            {
                "type": "features",
                "data": {
                    "title": "Why work with us",
                    "subtitle": "",
                    "columns": 3,
                    "features": [
                        {"icon": "Truck", "title": "Own fleet", "description": "Deliveries on schedule across the region."},
                        {"icon": "Package", "title": "Wide catalog", "description": "Thousands of items from trusted producers."},
                        {"icon": "ShieldCheck", "title": "Quality control", "description": "Every batch is checked on arrival."},
                    ],
                },
            },
            {"type": "dynamic_products", "data": {"title": "New products", "subtitle": "", "count": 3}},
            {"type": "dynamic_news", "data": {"title": "Company news", "subtitle": "", "count": 3}},
        ],
    },
    {
        "page_key": "about_page",
        "seo_title": "About the company",
        "seo_description": "Our history, our team and how we work with partners.",
        "blocks": [
            {
                "type": "text",
                "data": {
                    "title": "About us",
                    "content": "<p>We supply shops, restaurants and hotels with food and household goods.</p>",
                    "centered": True,
                    "max_width": "4xl",
                },
            },
            {
                "type": "timeline",
                "data": {
                    "title": "Our history",
                    "milestones": [
                        {"year": "2008", "title": "Founded", "description": "First warehouse and five delivery vans."},
                        {"year": "2015", "title": "Regional network", "description": "Three distribution centres."},
                        {"year": "2023", "title": "Online ordering", "description": "Partners order through the web portal."},
                    ],
                },
            },
        ],
    },
    {
        "page_key": "suppliers_page",
        "seo_title": "For suppliers",
        "seo_description": "How to become a supplier: requirements, steps and contacts.",
        "blocks": [
            {
                "type": "checklist",
                "data": {
                    "title": "What we expect from suppliers",
                    "subtitle": "",
                    "items": [
                        "Certified products",
                        "Stable delivery volumes",
                        "Transparent pricing",
                    ],
                    "sidebar": {
                        "title": "Ready to start?",
                        "content": "<p>Send us your price list and product range.</p>",
                        "cta_text": "Contact procurement",
                        "cta_href": "/contacts",
                    },
                },
            },
            {
                "type": "steps",
                "data": {
                    "title": "How to become a supplier",
                    "steps": [
                        {"title": "Application", "description": "Send a request with your catalog."},
                        {"title": "Review", "description": "Our category managers evaluate the offer."},
                        {"title": "Contract", "description": "We agree terms and sign the contract."},
                    ],
                },
            },
        ],
    },
    {
        "page_key": "contacts_page",
        "seo_title": "Contacts",
        "seo_description": "Addresses, phone numbers and office hours.",
        "blocks": [
            {
                "type": "text",
                "data": {
                    "title": "Contacts",
                    "content": (
                        "<p><strong>Phone:</strong> +1 555 010 2030</p>"
                        "<p><strong>Email:</strong> info@example.com</p>"
                        "<p><strong>Hours:</strong> Mon-Fri 9:00 - 18:00</p>"
                    ),
                    "centered": False,
                    "max_width": "4xl",
                },
            },
            {
                "type": "cta",
                "data": {
                    "title": "Have a question?",
                    "subtitle": "Our managers will answer within one business day.",
                    "cta_text": "Write to us",
                    "cta_href": "mailto:info@example.com",
                },
            },
        ],
    },
]


def build_document(config: dict) -> PageDocument:
    """Build a page document with fresh block ids from a seed config."""
    blocks = []
    for block_config in config["blocks"]:
        blocks.append(BlockInstance(
            id=generate_block_id({b.id for b in blocks}),
            type=block_config["type"],
            data=dict(block_config["data"]),
        ))
    return PageDocument(
        blocks=blocks,
        seo_title=config["seo_title"],
        seo_description=config["seo_description"],
    )


class Command(BaseCommand):
    help = "Seed the standard site pages with starter blocks"

    def add_arguments(self, parser):
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite pages that already have a document",
        )

    def handle(self, *args, **options):
        store = DocumentStore()

        for config in PAGES_CONFIG:
            page_key = config["page_key"]

            if store.get(page_key) is not None and not options["force"]:
                self.stdout.write(f"  Skipping existing page: {page_key}")
                continue

            store.put(page_key, build_document(config))
            self.stdout.write(self.style.SUCCESS(f"  Seeded: {page_key}"))

        self.stdout.write(self.style.SUCCESS("\nPage seed complete!"))
