"""
Underworld store panel.

Purchase flow (cash only):
1. validate price against the profile's cash
2. deduct cash
3. apply instant effects to the profile, then skill xp
4. start a timed boost when the product has a duration
5. record the purchase and refresh balance, boosts and history

A failure at any step stops the flow with a "Purchase Failed" toast; the
steps already written are not rolled back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from engine.error_handler import PurchaseError
from engine.store.client import StoreClient
from engine.toasts import ToastLog
from systems.underworld import (
    UnderworldProduct,
    boost_expiry,
    derive_boost,
    has_instant_effects,
    instant_effect_updates,
    skill_xp_effect,
    validate_purchase,
)
from ui.panels.base import PanelRow, StorePanel, dim_row, header_row, money, stat_row, title_row
from ui.screen_components import get_rarity_color

PRODUCTS_TABLE = "underworld_store_items"
HISTORY_LIMIT = 20


class UnderworldPanel(StorePanel):
    title = "Underworld Store"
    context = "underworld"

    def __init__(self, client: StoreClient, toasts: ToastLog, user_id: Optional[str]) -> None:
        super().__init__(client, toasts)
        self.user_id = user_id
        self.products: List[UnderworldProduct] = []
        self.balance: float = 0
        self.boosts: List[Dict[str, Any]] = []
        self.history: List[Dict[str, Any]] = []
        self.payment_method = "cash"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> bool:
        ok, rows = self._attempt(
            "load_products",
            lambda: self.client.table(PRODUCTS_TABLE).select("*").eq(
                "is_available", True
            ).order("category").execute().data or [],
            "Unable to load the store",
        )
        if not ok:
            return False
        self.products = [UnderworldProduct.from_row(r) for r in rows]
        return self.refresh()

    def refresh(self) -> bool:
        """Reload balance, active boosts and purchase history."""
        if not self.user_id:
            return True
        ok, profile = self._attempt(
            "balance",
            lambda: self.client.table("profiles").select("cash").eq("user_id", self.user_id).maybe_single().execute().data,
            "Unable to load balance",
        )
        if not ok:
            return False
        self.balance = (profile or {}).get("cash") or 0

        now = datetime.now(timezone.utc).isoformat()
        ok, boosts = self._attempt(
            "boosts",
            lambda: self.client.table("underworld_active_boosts").select("*").eq(
                "user_id", self.user_id
            ).gt("expires_at", now).execute().data or [],
            "Unable to load boosts",
        )
        if ok:
            self.boosts = boosts
        ok, history = self._attempt(
            "history",
            lambda: self.client.table("underworld_purchases").select(
                "*, underworld_store_items(name, category, rarity)"
            ).eq("user_id", self.user_id).order("purchased_at", desc=True).limit(HISTORY_LIMIT).execute().data or [],
            "Unable to load purchase history",
        )
        if ok:
            self.history = history
        return ok

    # ------------------------------------------------------------------
    # Purchasing
    # ------------------------------------------------------------------

    def purchase(self, product_id: str, now: Optional[datetime] = None) -> bool:
        product = next((p for p in self.products if p.id == product_id), None)
        if product is None or not self.user_id:
            self._fail(PurchaseError(f"unknown product {product_id}", user_message="Product not found"),
                       "purchase", "Purchase Failed")
            return False

        ok, _ = self._attempt("purchase", lambda: self._run_purchase(product, now), "Purchase Failed")
        if not ok:
            return False
        self.toasts.success("Purchase Complete", f"You acquired {product.name}!")
        self.refresh()
        return True

    def _run_purchase(self, product: UnderworldProduct, now: Optional[datetime]) -> None:
        profile = self.client.table("profiles").select(
            "id, cash, health, energy, experience, fame"
        ).eq("user_id", self.user_id).single().execute().data
        price = validate_purchase(product, self.payment_method, profile.get("cash") or 0)

        self.client.table("profiles").update({"cash": profile["cash"] - price}).eq("user_id", self.user_id).execute()

        effects = product.effects
        if has_instant_effects(effects):
            updates = instant_effect_updates(effects, profile)
            self.client.table("profiles").update(updates).eq("user_id", self.user_id).execute()

        skill = skill_xp_effect(effects)
        if skill is not None:
            self._grant_skill_xp(profile["id"], *skill)

        if product.duration_hours:
            boost_type, boost_value = derive_boost(effects)
            self.client.table("underworld_active_boosts").insert({
                "user_id": self.user_id,
                "product_id": product.id,
                "boost_type": boost_type,
                "boost_value": boost_value,
                "expires_at": boost_expiry(product.duration_hours, now),
            }).execute()

        self.client.table("underworld_purchases").insert({
            "user_id": self.user_id,
            "product_id": product.id,
            "payment_method": self.payment_method,
            "amount_paid": price,
            "effects_applied": effects,
        }).execute()

    def _grant_skill_xp(self, profile_id: str, slug: str, amount: int) -> None:
        existing = self.client.table("skill_progress").select("id, current_xp").eq(
            "profile_id", profile_id
        ).eq("skill_slug", slug).maybe_single().execute().data
        if existing:
            self.client.table("skill_progress").update(
                {"current_xp": (existing.get("current_xp") or 0) + amount}
            ).eq("id", existing["id"]).execute()
        else:
            self.client.table("skill_progress").insert(
                {"profile_id": profile_id, "skill_slug": slug, "current_xp": amount}
            ).execute()

    def rows(self) -> List[PanelRow]:
        out = [
            title_row(self.title),
            stat_row("Cash", money(self.balance)),
            stat_row("Active boosts", len(self.boosts)),
            header_row("Products"),
        ]
        for product in self.products:
            price = money(product.price_cash) if product.price_cash else f"{product.price_token_amount or 0} tokens"
            hours = f"  {product.duration_hours:g}h" if product.duration_hours else ""
            out.append(PanelRow(f"{product.name}  {price}{hours}", get_rarity_color(product.rarity), 1))
        if not self.products:
            out.append(dim_row("The shelves are empty"))
        if self.history:
            out.append(header_row("Recent purchases"))
            for entry in self.history:
                item = entry.get("underworld_store_items") or {}
                out.append(dim_row(f"{item.get('name', 'Unknown')}  {money(entry.get('amount_paid') or 0)}", indent=1))
        return out
