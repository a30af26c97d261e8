"""User-agent parsing into device / OS / browser fields."""

from user_agents import parse

from trackdrop.api.access.dto.access import ClientInfo

_PLACEHOLDER_FAMILIES = {"", "Other", "Generic Smartphone", "Generic Feature Phone"}


def _family(value: str | None) -> str | None:
    if value is None or value.strip() in _PLACEHOLDER_FAMILIES:
        return None
    return value.strip()


def _version(value: str | None) -> str | None:
    return value or None


def _device_type(user_agent) -> str | None:
    if user_agent.is_bot:
        return "bot"
    if user_agent.is_tablet:
        return "tablet"
    if user_agent.is_mobile:
        return "mobile"
    if user_agent.is_pc:
        return "desktop"
    return None


def parse_user_agent(ua_string: str | None) -> ClientInfo:
    if not ua_string or not ua_string.strip():
        return ClientInfo()

    user_agent = parse(ua_string)
    return ClientInfo(
        device_type=_device_type(user_agent),
        device_vendor=_family(user_agent.device.brand),
        device_model=_family(user_agent.device.model),
        os_name=_family(user_agent.os.family),
        os_version=_version(user_agent.os.version_string),
        browser_name=_family(user_agent.browser.family),
        browser_version=_version(user_agent.browser.version_string),
    )
