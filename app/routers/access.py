"""
Token gate, server side. The client runs the gate itself (age, wallet, balance); these endpoints
give it the chain parameters and let any server-side consumer re-derive access from the chain
instead of trusting a client-reported balance.
"""
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, status
from app.config import get_settings
from app.feed.access_gate import chain_id_hex
from app.schemas.access import AccessResponse, ChainConfigResponse
from app.services.chain import ChainQueryError, get_chain_service, is_address

router = APIRouter(prefix="/api/access", tags=["access"])


@router.get("/config", response_model=ChainConfigResponse)
def chain_config():
    settings = get_settings()
    return ChainConfigResponse(
        chain_id=settings.chain_id,
        chain_id_hex=chain_id_hex(settings.chain_id),
        chain_name=settings.chain_name,
        rpc_url=settings.chain_rpc_url,
        explorer_url=settings.chain_explorer_url,
        token_address=settings.token_address,
        required_balance=settings.required_balance,
    )


@router.get("/{address}", response_model=AccessResponse)
def check_access(address: str, chain=Depends(get_chain_service)):
    """Balance of the gate token at address, read from the chain now."""
    settings = get_settings()
    if not is_address(address):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid wallet address")
    if not is_address(settings.token_address):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Token gate is not configured")
    try:
        balance = chain.token_balance(settings.token_address, address)
    except ChainQueryError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to check token balance")
    return AccessResponse(
        address=address,
        balance=float(balance),
        required_balance=settings.required_balance,
        has_access=balance >= Decimal(str(settings.required_balance)),
    )
