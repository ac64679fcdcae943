import os
import unittest
from decimal import Decimal
from unittest import mock

from groupmeal.domain.GroceryList import GroceryLineItem, GroceryList
from groupmeal.infra.pdf_utils import generate_pdf_for_grocery_list
from groupmeal.logic.shopping.delivery_format import format_fallback, format_for_delivery, item_line
from groupmeal.utilities.constants import DELIVERY_FOOTER, DELIVERY_HEADER


def grocery_list():
    return GroceryList(items=[
        GroceryLineItem("rice|mass", "rice", 600.0, "g", "mass", "grains", "Pantry/Dry Goods",
                        Decimal("2.49"), ["adults", "kids"], purchase_quantity=1000.0),
        GroceryLineItem("lemon|count", "lemon", 2.0, "pcs", "count", "produce", "Produce",
                        Decimal("0.00"), ["adults"], flags=["no-price"]),
        GroceryLineItem("milk|volume", "milk", 250.5, "ml", "volume", "dairy", "Dairy",
                        Decimal("0.40"), ["kids"], purchased=True),
    ])


class FakeResponses:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return mock.Mock(output_text=self.text)


class FakeClient:
    def __init__(self, text=None, error=None):
        self.responses = FakeResponses(text, error)


class TestDeliveryFormat(unittest.TestCase):

    def test_item_lines(self):
        items = grocery_list().items
        self.assertEqual(item_line(items[0]), "- 1000 g rice")
        self.assertEqual(item_line(items[1]), "- 2 lemon")
        self.assertEqual(item_line(items[2]), "- 251 ml milk")

    def test_fallback_layout(self):
        text = format_fallback(grocery_list())
        lines = text.split("\n")
        self.assertEqual(lines[0], DELIVERY_HEADER)
        self.assertEqual(lines[1:3], ["- 1000 g rice", "- 2 lemon"])
        self.assertNotIn("milk", text)
        self.assertTrue(text.endswith(DELIVERY_FOOTER))

    def test_without_api_key_uses_fallback(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop("OPENAI_API_KEY", None)
            self.assertEqual(format_for_delivery(grocery_list()), format_fallback(grocery_list()))

    def test_ai_text_is_used(self):
        client = FakeClient(text="  Please add: rice  ")
        self.assertEqual(format_for_delivery(grocery_list(), client=client), "Please add: rice")
        self.assertIn("rice", client.responses.calls[0]["input"])
        self.assertNotIn("milk", client.responses.calls[0]["input"])

    def test_ai_failure_falls_back(self):
        client = FakeClient(error=RuntimeError("quota"))
        with self.assertLogs("groupmeal.logic.shopping.delivery_format", level="ERROR"):
            text = format_for_delivery(grocery_list(), client=client)
        self.assertEqual(text, format_fallback(grocery_list()))

    def test_empty_ai_answer_falls_back(self):
        self.assertEqual(format_for_delivery(grocery_list(), client=FakeClient(text="")),
                         format_fallback(grocery_list()))


class TestGroceryListPdf(unittest.TestCase):

    def test_pdf_bytes(self):
        pdf = generate_pdf_for_grocery_list(grocery_list())
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_empty_list_still_renders(self):
        self.assertTrue(generate_pdf_for_grocery_list(GroceryList()).startswith(b"%PDF"))


if __name__ == "__main__":
    unittest.main()
