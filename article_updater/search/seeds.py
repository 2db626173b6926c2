"""Curated reference URLs for topics the corpus covers repeatedly."""

from __future__ import annotations

# Each entry: keywords that must all appear in the lowercased query, then URLs.
TOPIC_SEEDS: list[tuple[tuple[str, ...], list[str]]] = [
    (
        ("live chat", "chatbot"),
        [
            "https://freshdesk.com/customer-engagement/chatbots-vs-live-chat-blog/",
            "https://www.zendesk.com/blog/chatbots-vs-live-chat/",
        ],
    ),
    (
        ("customer service", "issues"),
        [
            "https://www.zendesk.com/blog/common-customer-service-problems/",
            "https://www.helpscout.com/blog/customer-service-problems/",
        ],
    ),
    (
        ("customer service", "platform"),
        [
            "https://www.zendesk.com/blog/customer-service-platform/",
            "https://freshdesk.com/customer-service/software/customer-service-platform-blog/",
        ],
    ),
    (
        ("e-commerce", "chatbot"),
        [
            "https://www.shopify.com/blog/chatbots",
            "https://www.bigcommerce.com/blog/chatbots/",
        ],
    ),
    (
        ("sales hero",),
        [
            "https://www.salesforcesearch.com/blog/httpwww-salesforcesearch-combid1826183-tips-to-transforming-yourself-from-a-sales-zero-to-hero/",
            "https://milkshakehairpro.com/blogs/news/how-to-use-a-hero-strategy-to-boost-retail-sales",
        ],
    ),
]

DEFAULT_SEEDS: list[str] = [
    "https://en.wikipedia.org/wiki/Chatbot",
    "https://www.ibm.com/think/topics/chatbots",
]


def topic_seeds(query: str) -> list[str]:
    """Return the curated URLs for the first topic whose keywords all match."""
    text = str(query).lower()
    for keywords, urls in TOPIC_SEEDS:
        if all(keyword in text for keyword in keywords):
            return list(urls)
    return list(DEFAULT_SEEDS)
