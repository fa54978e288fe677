from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Schémas des payloads Birdeye (champ `data` de l'enveloppe) ---
# Les montants sont en Decimal : jamais de float pour des calculs financiers.

class PriceData(BaseModel):
    """Prix d'un token (/defi/price)"""
    value: Decimal                          = Field(..., description="Prix courant en USD")
    update_unix_time: int                   = Field(0, alias="updateUnixTime", description="Dernière mise à jour (timestamp UNIX)")
    update_human_time: Optional[str]        = Field(None, alias="updateHumanTime", description="Dernière mise à jour, lisible")
    price_change_24h: Decimal               = Field(Decimal(0), alias="priceChange24h", description="Variation du prix sur 24h (%)")

    model_config = ConfigDict(populate_by_name=True)


class TokenExtensions(BaseModel):
    """Métadonnées et liens sociaux optionnels"""
    coingecko: Optional[str]    = Field(None, description="Identifiant CoinGecko")
    twitter: Optional[str]      = Field(None, description="Compte ou URL Twitter")
    website: Optional[str]      = Field(None, description="Site du projet")
    telegram: Optional[str]     = Field(None, description="Groupe Telegram")
    discord: Optional[str]      = Field(None, description="Serveur Discord")
    description: Optional[str]  = Field(None, description="Courte description du token")


class TokenOverview(BaseModel):
    """
    Vue marché d'un token (/defi/token_overview).
    Sert au screening : liquidité minimale, volume, nombre de holders, market cap.
    """
    address: str                                    = Field(..., description="Adresse du mint")
    symbol: Optional[str]                           = Field(None, description="Symbole (ex SOL)")
    name: Optional[str]                             = Field(None, description="Nom complet (ex Solana)")
    decimals: int                                   = Field(0, description="Nombre de décimales")
    logo_uri: Optional[str]                         = Field(None, alias="logoURI")
    liquidity: Decimal                              = Field(Decimal(0), description="Liquidité totale en USD")
    price: Decimal                                  = Field(Decimal(0), description="Prix courant en USD")
    price_change_24h_percent: Decimal               = Field(Decimal(0), alias="priceChange24hPercent")
    volume_24h: Decimal                             = Field(Decimal(0), alias="v24h")
    volume_24h_usd: Decimal                         = Field(Decimal(0), alias="v24hUSD")
    volume_24h_change_percent: Decimal              = Field(Decimal(0), alias="v24hChangePercent")
    market_cap: Decimal                             = Field(Decimal(0), alias="mc")
    supply: Decimal                                 = Field(Decimal(0))
    circulating_supply: Decimal                     = Field(Decimal(0), alias="circulatingSupply")
    holder: int                                     = Field(0, description="Nombre de holders uniques")
    trade_24h: int                                  = Field(0, alias="trade24h")
    trade_24h_change_percent: Decimal               = Field(Decimal(0), alias="trade24hChangePercent")
    buy_24h: int                                    = Field(0, alias="buy24h")
    sell_24h: int                                   = Field(0, alias="sell24h")
    unique_wallet_24h: int                          = Field(0, alias="uniqueWallet24h")
    unique_wallet_24h_change_percent: Decimal       = Field(Decimal(0), alias="uniqueWallet24hChangePercent")
    last_trade_unix_time: int                       = Field(0, alias="lastTradeUnixTime")
    last_trade_human_time: Optional[str]            = Field(None, alias="lastTradeHumanTime")
    extensions: Optional[TokenExtensions]           = None

    model_config = ConfigDict(populate_by_name=True)


class TransferFeeData(BaseModel):
    """Configuration des frais de transfert (Token-2022)"""
    transfer_fee_bps: int               = Field(0, alias="transferFeeBps", description="Frais en points de base (100 = 1%)")
    max_fee: Optional[str]              = Field(None, alias="maxFee")
    fee_authority: Optional[str]        = Field(None, alias="feeAuthority")
    withdraw_authority: Optional[str]   = Field(None, alias="withdrawAuthority")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class TokenSecurity(BaseModel):
    """
    Informations de sécurité d'un token (/defi/token_security).
    Signaux d'alerte : mint/freeze authority actives, concentration des holders.
    """
    mint_authority: Optional[str]               = Field(None, alias="mintAuthority")
    freeze_authority: Optional[str]             = Field(None, alias="freezeAuthority")
    creator_address: Optional[str]              = Field(None, alias="creatorAddress")
    creator_balance: Optional[str]              = Field(None, alias="creatorBalance")
    creator_percentage: Optional[str]           = Field(None, alias="creatorPercentage")
    owner_address: Optional[str]                = Field(None, alias="ownerAddress")
    owner_balance: Optional[str]                = Field(None, alias="ownerBalance")
    owner_percentage: Optional[str]             = Field(None, alias="ownerPercentage")
    top10_holder_balance: Optional[str]         = Field(None, alias="top10HolderBalance")
    top10_holder_percent: Optional[str]         = Field(None, alias="top10HolderPercent")
    top10_user_balance: Optional[str]           = Field(None, alias="top10UserBalance")
    top10_user_percent: Optional[str]           = Field(None, alias="top10UserPercent")
    total_supply: Optional[str]                 = Field(None, alias="totalSupply")
    is_token_2022: bool                         = Field(False, alias="isToken2022")
    transfer_fee_enable: bool                   = Field(False, alias="transferFeeEnable")
    transfer_fee_data: Optional[TransferFeeData] = Field(None, alias="transferFeeData")
    non_transferable: bool                      = Field(False, alias="nonTransferable")
    mutable_metadata: bool                      = Field(False, alias="mutableMetadata")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    @property
    def has_mint_authority(self) -> bool:
        """Plus de tokens peuvent être mintés à tout moment (dilution)."""
        return bool(self.mint_authority)

    @property
    def has_freeze_authority(self) -> bool:
        """Les comptes des holders peuvent être gelés."""
        return bool(self.freeze_authority)
