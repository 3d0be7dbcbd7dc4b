from pydantic import BaseModel


class ChainConfigResponse(BaseModel):
    """What the client needs to switch (or add) the wallet network and read the gate token."""
    chain_id: int
    chain_id_hex: str
    chain_name: str
    rpc_url: str
    explorer_url: str
    token_address: str
    required_balance: float


class AccessResponse(BaseModel):
    address: str
    balance: float
    required_balance: float
    has_access: bool
