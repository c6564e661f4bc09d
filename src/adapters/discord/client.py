"""
Discord REST client helpers.

Shared httpx.Client construction and error description for the Discord
member directory and messenger adapters.
"""

import httpx

USER_AGENT = "DiscordBot (guildgate, 0.1.0)"


def create_client(api_url: str, bot_token: str, timeout: float = 10.0) -> httpx.Client:
    """Create an authenticated client for the Discord REST API."""
    return httpx.Client(
        base_url=api_url,
        headers={"Authorization": f"Bot {bot_token}", "User-Agent": USER_AGENT},
        timeout=timeout,
    )


def describe_error(response: httpx.Response) -> str:
    """
    Render a Discord error response.

    Discord error bodies look like {"code": 10007, "message": "Unknown Member"}.
    """
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text}"
    if isinstance(body, dict) and "message" in body:
        return f"DiscordAPIError[{body.get('code', response.status_code)}]: {body['message']}"
    return f"HTTP {response.status_code}: {response.text}"
