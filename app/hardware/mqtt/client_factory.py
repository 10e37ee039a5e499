"""
Helpers for constructing MQTT clients that work across paho-mqtt 1.x and 2.x.

The 2.x releases add a callback API version flag; we pin the version-1
callback signatures (``on_connect(client, userdata, flags, rc)``) so the
wrapper's handlers work on both.
"""
from __future__ import annotations

from typing import Any, Dict

import paho.mqtt.client as mqtt


def create_mqtt_client(
    client_id: str = "",
    *,
    reconnect_min_delay: int | None = None,
    reconnect_max_delay: int | None = None,
    **kwargs: Any,
) -> mqtt.Client:
    """
    Build an MQTT client and configure paho's automatic reconnect back-off.

    Args:
        client_id: Optional client identifier.
        reconnect_min_delay: First reconnect delay in seconds.
        reconnect_max_delay: Upper bound for the exponential reconnect delay.
        kwargs: Extra keyword arguments forwarded to the client constructor.
    """
    client_kwargs: Dict[str, Any] = {"client_id": client_id or ""}
    client_kwargs["protocol"] = kwargs.pop("protocol", mqtt.MQTTv311)
    client_kwargs.update(kwargs)

    callback_api_version = getattr(mqtt, "CallbackAPIVersion", None)
    if callback_api_version is not None:
        client_kwargs["callback_api_version"] = callback_api_version.VERSION1

    client = mqtt.Client(**client_kwargs)

    if reconnect_min_delay is not None:
        max_delay = reconnect_max_delay if reconnect_max_delay is not None else reconnect_min_delay
        client.reconnect_delay_set(min_delay=reconnect_min_delay, max_delay=max(max_delay, reconnect_min_delay))
    return client
