"""Configuration options and default settings of the measurement agent."""

from __future__ import annotations

import ipaddress
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from bbkmeasure.defs import APP_NAME, APP_VERSION
from bbkmeasure.jsonvalue import Json

log = logging.getLogger(__name__)

BBK_DOMAIN = "bredbandskollen.se"
FALLBACK_SERVER_IPV4 = "192.36.30.2"
FALLBACK_SERVER_IPV6 = "2001:67c:2ff4::2"
_HASHKEY_CHARS = frozenset("0123456789ABCDEFabcdef-")
_ATTR_RE = re.compile(r"[a-z]{1,20}")
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


class OptionError(ValueError):
    """Raised when a configuration option has a value that cannot be used."""


def is_valid_hashkey(key: str) -> bool:
    """True for 12 to 40 characters of hex digits and dashes."""
    return 12 <= len(key) <= 40 and set(key) <= _HASHKEY_CHARS


def hashkey_cookie_domain(hostname: str) -> str:
    """Cookie domain for storing the hash key received from ``hostname``."""
    if hostname.endswith(BBK_DOMAIN):
        return "." + BBK_DOMAIN
    return hostname


@dataclass
class ServerHost:
    """Address of a web or measurement server."""

    hostname: str = ""
    port: int = 80
    iptype: int = 4
    proxy_host: str = ""
    proxy_port: int = 0


def _default_report() -> dict[str, str]:
    return {
        "appname": APP_NAME,
        "appver": APP_VERSION,
        "dlength": "10",
        "ulength": "10",
    }


def _int_prefix(value: str) -> int | None:
    match = _INT_PREFIX.match(value)
    if not match:
        return None
    number = int(match.group(1))
    if not _INT32_MIN <= number <= _INT32_MAX:
        return None
    return number


def _float_prefix(value: str) -> float | None:
    match = _FLOAT_PREFIX.match(value)
    return float(match.group(1)) if match else None


@dataclass
class AgentSettings:
    """Options that steer the agent: servers, URLs and report attributes.

    ``report_sink`` receives ``Report.*`` options while a measurement is
    running; without one they are ignored.
    """

    webserver: ServerHost = field(default_factory=ServerHost)
    measurement_server: ServerHost = field(default_factory=ServerHost)
    report_template: dict[str, str] = field(default_factory=_default_report)
    force_key: str = ""
    local_address: str = ""
    log_to_console: bool = False
    settings_url: str = "/api/servers"
    contents_url: str = "/api/content"
    measurements_url: str = "/api/measurements"
    report_sink: Callable[[str, str], None] | None = None

    def handle_option(self, name: str, value: str) -> bool:
        """Apply one option; return False if it was ignored or unknown."""
        log.info("option: %s value: %s", name, value)
        if name == "Logging.LogToConsole":
            if value:
                self.log_to_console = True
        elif name.startswith("Client."):
            attr = name[7:]
            if not _ATTR_RE.fullmatch(attr):
                log.info("will ignore option %s", name)
                return False
            if attr == "hashkey":
                self.force_key = value
            else:
                self.report_template[attr] = value
        elif name.startswith("Report."):
            attr = name[7:]
            if not _ATTR_RE.fullmatch(attr) or self.report_sink is None:
                log.info("will ignore option %s", name)
                return False
            self.report_sink(attr, value)
        elif name == "Measure.IpType":
            self.webserver.iptype = 6 if value == "ipv6" else 4
        elif name == "Measure.Webserver":
            self.webserver.hostname = value
        elif name == "Measure.Server":
            self.measurement_server.hostname = value
        elif name == "Measure.LocalAddress":
            try:
                ipaddress.ip_address(value)
            except ValueError:
                raise OptionError("cannot use local address") from None
            self.local_address = value
        elif name == "Measure.ProxyServerUrl":
            self.webserver.proxy_host = value
            self.measurement_server.proxy_host = value
        elif name == "Measure.ProxyServerPort":
            port = _int_prefix(value)
            self.webserver.proxy_port = 80 if port is None else port % 65536
            self.measurement_server.proxy_port = self.webserver.proxy_port
        elif name == "Measure.LoadDuration":
            duration = _float_prefix(value)
            if duration is None:
                duration = 10.0
            duration = min(max(duration, 2.0), 10.0)
            text = "%f" % duration
            self.report_template["dlength"] = text
            self.report_template["ulength"] = text
        elif name == "Measure.SpeedLimit":
            if value:
                self.report_template["speedlimit"] = value
            else:
                self.report_template.pop("speedlimit", None)
        elif name == "Measure.AutoSaveReport":
            self.report_template["autosave"] = value
        elif name == "Measure.SettingsUrl":
            self.settings_url = value
        elif name == "Measure.ContentsUrl":
            self.contents_url = value
        elif name == "Measure.MeasurementsUrl":
            self.measurements_url = value
        elif name == "options_file":
            pass
        else:
            log.info("%s: unknown option", name)
            return False
        return True

    @property
    def config_domain(self) -> str:
        """Domain under which the hash key of the default settings is stored."""
        if self.webserver.hostname == "none":
            return self.measurement_server.hostname
        return self.webserver.hostname

    def default_config(self, hashkey: str) -> str:
        """Settings JSON used when none could be fetched from the web server."""
        mserver4 = mserver6 = self.measurement_server.hostname
        domain = self.webserver.hostname
        if domain != "none" and domain.endswith(BBK_DOMAIN) and not mserver4:
            mserver4 = FALLBACK_SERVER_IPV4
            mserver6 = FALLBACK_SERVER_IPV6

        if not mserver4:
            return Json({"ispname": "", "hashkey": hashkey}).dump()

        return Json({
            "servers": [
                {"url": mserver4, "name": mserver4, "type": "ipv4"},
                {"url": mserver6, "name": mserver6, "type": "ipv6"},
            ],
            "ispname": "",
            "hashkey": hashkey,
        }).dump()