# storefront/repositories/order_repo.py
from typing import Any

from supabase import Client


class OrderRepository:
    """
    Write access to checkout tables in Supabase.

    - customers, orders, order_items inserts
    - order numbers come from the `generate_order_number` RPC
    """

    def list_shipping_rates(self, client: Client) -> list[dict[str, Any]]:
        resp = client.table("shipping_rates").select("*").order("rate").execute()
        return resp.data or []

    def create_customer(self, client: Client, customer: dict[str, Any]) -> dict[str, Any]:
        resp = client.table("customers").insert(customer).execute()
        return resp.data[0]

    def generate_order_number(self, client: Client) -> str:
        resp = client.rpc("generate_order_number").execute()
        return str(resp.data)

    def create_order(self, client: Client, order: dict[str, Any]) -> dict[str, Any]:
        resp = client.table("orders").insert(order).execute()
        return resp.data[0]

    def create_items(self, client: Client, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        resp = client.table("order_items").insert(items).execute()
        return resp.data or []
