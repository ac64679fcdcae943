"""Delivery-order text for a consolidated grocery list.

With OPENAI_API_KEY set, a model rewrites the list into grocery-store
purchasing language. Without a key, or when the call fails or returns nothing,
a deterministic formatter renders one '- <quantity> <unit> <name>' line per item.
"""
import logging
import math
import os
from typing import Optional

from openai import OpenAI

from groupmeal.domain.GroceryList import GroceryList, GroceryLineItem
from groupmeal.utilities import config
from groupmeal.utilities.constants import DELIVERY_FOOTER, DELIVERY_HEADER, DELIVERY_PROMPT_TEMPLATE

logger = logging.getLogger(__name__)


# === Helper: Get OpenAI Client ===
def _get_openai_client():
    """Return an OpenAI client if OPENAI_API_KEY is set, otherwise None."""
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        return None
    return OpenAI(api_key=api_key)


def _format_quantity(value: float) -> str:
    # whole units only; there must be enough
    return str(math.ceil(round(value, 6)))


def item_line(item: GroceryLineItem) -> str:
    unit = "" if item.unit == "pcs" else f" {item.unit}"
    return f"- {_format_quantity(item.purchase_quantity)}{unit} {item.name}"


def format_fallback(grocery_list: GroceryList) -> str:
    lines = [DELIVERY_HEADER]
    lines.extend(item_line(item) for item in grocery_list.items if not item.purchased)
    lines.append("")
    lines.append(DELIVERY_FOOTER)
    return "\n".join(lines)


def _ingredient_block(grocery_list: GroceryList) -> str:
    return "\n".join(f"{i.name}: {i.quantity:g} {i.unit} ({i.category})"
                     for i in grocery_list.items if not i.purchased)


def format_with_ai(grocery_list: GroceryList, client: OpenAI) -> Optional[str]:
    prompt = DELIVERY_PROMPT_TEMPLATE.format(header=DELIVERY_HEADER, footer=DELIVERY_FOOTER)
    try:
        response = client.responses.create(
            model=config.OPENAI_MODEL,
            input=prompt + _ingredient_block(grocery_list),
        )
    except Exception:
        logger.exception("Delivery-order request to OpenAI failed")
        return None
    text = (response.output_text or "").strip()
    if not text:
        logger.warning("AI returned an empty delivery order")
        return None
    return text


def format_for_delivery(grocery_list: GroceryList, client: Optional[OpenAI] = None) -> str:
    """Delivery-order text; AI-written when a client is available, deterministic otherwise."""
    client = client or _get_openai_client()
    if client is None:
        logger.info("OPENAI_API_KEY not set, using the plain delivery formatter.")
    elif grocery_list.items:
        text = format_with_ai(grocery_list, client)
        if text:
            return text
    return format_fallback(grocery_list)


__all__ = ['format_for_delivery', 'format_fallback', 'format_with_ai', 'item_line']
