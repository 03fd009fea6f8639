# storefront/repositories/admin_repo.py
from typing import Any

from supabase import Client


class AdminRepository:
    """
    Supabase Auth + `admin_users` lookups.

    Supabase errors (invalid credentials, network) propagate to the service.
    """

    def sign_in(self, client: Client, email: str, password: str) -> str | None:
        """Return the auth user id, or None if Supabase returned no user."""
        resp = client.auth.sign_in_with_password({"email": email, "password": password})
        if resp.user is None:
            return None
        return str(resp.user.id)

    def sign_out(self, client: Client) -> None:
        client.auth.sign_out()

    def get_active_admin(self, client: Client, user_id: str) -> dict[str, Any] | None:
        resp = (
            client.table("admin_users")
            .select("id, email, role, is_active")
            .eq("id", user_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
        rows = resp.data or []
        return rows[0] if rows else None
