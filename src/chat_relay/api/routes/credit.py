"""
Route API pour la consultation du crédit.
"""
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ...services.credit import query_credit

router = APIRouter()


class CreditQuery(BaseModel):
    apikey: Optional[str] = None
    text: Optional[str] = None


@router.post("/credit")
async def credit_query(query: CreditQuery, request: Request):
    """Retourne le solde disponible au format {code, title, html}."""
    state = request.app.state
    result = await query_credit(
        state.relay_client,
        state.settings,
        api_key_override=query.apikey,
        text=query.text
    )
    return result.to_dict()
