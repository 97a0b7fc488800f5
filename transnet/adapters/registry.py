"""
Exchange registry.

Adapter classes register themselves under their exchange name with the
``register_adapter`` decorator when their package is imported. At startup
``ExchangeRegistry.from_config`` pairs every registered class with its
configuration, producing the lookup table used to build clients from
stored credentials. Adding an exchange means adding a package and a config
entry; nothing here changes.

Example:
    >>> registry = ExchangeRegistry.from_config(load_config())
    >>> client = registry.create_client("Binance", api_key, api_secret)
    >>> balances = await client.get_balance()
"""

from typing import Callable, Dict, List, Optional, Tuple, Type

import structlog

from transnet.adapters.errors import UnsupportedExchangeError
from transnet.config.models import AdvertisedExchange, AppConfig, ExchangeConfig
from transnet.interfaces.exchange_adapter import ExchangeAdapter

logger = structlog.get_logger(__name__)

_ADAPTER_CLASSES: Dict[str, Type[ExchangeAdapter]] = {}


def register_adapter(
    name: str,
) -> Callable[[Type[ExchangeAdapter]], Type[ExchangeAdapter]]:
    """
    Class decorator registering an adapter under an exchange name.

    Args:
        name: Exchange identifier, matched case-insensitively.

    Raises:
        ValueError: If another class is already registered under the name.
    """
    key = name.lower()

    def decorator(cls: Type[ExchangeAdapter]) -> Type[ExchangeAdapter]:
        existing = _ADAPTER_CLASSES.get(key)
        if existing is not None and existing is not cls:
            raise ValueError(f"Adapter already registered for {key}: {existing.__name__}")
        _ADAPTER_CLASSES[key] = cls
        return cls

    return decorator


def registered_adapters() -> Dict[str, Type[ExchangeAdapter]]:
    """Return a copy of the registered adapter classes."""
    return dict(_ADAPTER_CLASSES)


class ExchangeRegistry:
    """
    Lookup table from exchange name to adapter class and configuration.

    Attributes:
        advertised: Exchanges offered in the settings form, which may include
            exchanges without an adapter.
    """

    def __init__(
        self,
        entries: Dict[str, Tuple[Type[ExchangeAdapter], ExchangeConfig]],
        advertised: Optional[List[AdvertisedExchange]] = None,
    ):
        self._entries = {name.lower(): entry for name, entry in entries.items()}
        self.advertised = list(advertised or [])

    @classmethod
    def from_config(cls, config: AppConfig) -> "ExchangeRegistry":
        """
        Build the lookup table from configuration.

        Only exchanges that are both registered and enabled in configuration
        become available.

        Args:
            config: Application configuration.

        Returns:
            ExchangeRegistry: Ready-to-use registry.
        """
        entries: Dict[str, Tuple[Type[ExchangeAdapter], ExchangeConfig]] = {}
        for name, adapter_cls in _ADAPTER_CLASSES.items():
            exchange_config = config.get_exchange(name)
            if exchange_config is None:
                logger.warning("adapter_without_config", exchange=name)
                continue
            if not exchange_config.enabled:
                continue
            entries[name] = (adapter_cls, exchange_config)

        logger.info(
            "exchange_registry_built",
            implemented=sorted(entries),
            advertised=[ex.name for ex in config.advertised_exchanges],
        )
        return cls(entries, config.advertised_exchanges)

    def create_client(
        self,
        exchange_name: str,
        api_key: str,
        api_secret: str,
        passphrase: Optional[str] = None,
        testnet: bool = False,
    ) -> ExchangeAdapter:
        """
        Build an adapter bound to the given credentials.

        Args:
            exchange_name: Exchange identifier, any case.
            api_key: API key.
            api_secret: API secret.
            passphrase: Optional passphrase for exchanges that use one.
            testnet: Use the testnet endpoint when configured.

        Returns:
            ExchangeAdapter: New adapter instance. Callers close it.

        Raises:
            UnsupportedExchangeError: If no adapter is available for the name.
        """
        entry = self._entries.get(exchange_name.lower())
        if entry is None:
            raise UnsupportedExchangeError(exchange_name)
        adapter_cls, exchange_config = entry
        return adapter_cls(
            api_key=api_key,
            api_secret=api_secret,
            exchange_config=exchange_config,
            passphrase=passphrase,
            testnet=testnet,
        )

    def supported_exchanges(self) -> List[str]:
        """
        Advertised exchange names, independent of the implemented set.

        Returns:
            List[str]: e.g. ["mexc", "binance", "kucoin", ...]
        """
        return [ex.name for ex in self.advertised]

    def implemented_exchanges(self) -> List[str]:
        """Exchange names with an adapter, sorted."""
        return sorted(self._entries)

    def is_implemented(self, exchange_name: str) -> bool:
        """True when create_client would succeed for the name."""
        return exchange_name.lower() in self._entries

    def display_name(self, exchange_name: str) -> str:
        """
        Human-readable exchange name.

        Falls back to the upper-cased identifier.
        """
        key = exchange_name.lower()
        entry = self._entries.get(key)
        if entry is not None:
            return entry[1].display_name
        for advertised in self.advertised:
            if advertised.name == key:
                return advertised.display_name
        return exchange_name.upper()

    def __repr__(self) -> str:
        return f"ExchangeRegistry(implemented={self.implemented_exchanges()})"
