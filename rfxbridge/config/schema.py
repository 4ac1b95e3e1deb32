"""Marshmallow schema for BridgeConfig validation.

Keys use the camelCase names of the RFXCOM bridge settings (``serialPort``,
``ignoreConfig``, ``enableX10``...); snake_case spellings are accepted too.
"""

from __future__ import annotations

from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, pre_load, validate

from ..const import (
    DEFAULT_BRIDGE_UID,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RESET_DELAY,
    DEFAULT_RESPONSE_TIMEOUT,
    DEFAULT_TCP_PORT,
    DEFAULT_TRANSMIT_POWER,
    MAX_TRANSMIT_POWER,
    MIN_TRANSMIT_POWER,
)
from ..errors import ConfigurationError
from .settings import BridgeConfig, ProtocolFlags


class ProtocolFlagsSchema(Schema):
    """Receive protocol flags, flattened into the bridge settings."""

    class Meta:
        unknown = EXCLUDE

    enable_undecoded = fields.Bool(load_default=False, data_key="enableUndecoded")
    enable_imagintronix_opus = fields.Bool(load_default=False, data_key="enableImagintronixOpus")
    enable_byron_sx = fields.Bool(load_default=False, data_key="enableByronSX")
    enable_rsl = fields.Bool(load_default=False, data_key="enableRSL")
    enable_lighting4 = fields.Bool(load_default=False, data_key="enableLighting4")
    enable_fineoffset_viking = fields.Bool(load_default=False, data_key="enableFineOffsetViking")
    enable_rubicson = fields.Bool(load_default=False, data_key="enableRubicson")
    enable_ae_blyss = fields.Bool(load_default=False, data_key="enableAEBlyss")
    enable_blinds_t1_t2_t3_t4 = fields.Bool(load_default=False, data_key="enableBlindsT1T2T3T4")
    enable_blinds_t0 = fields.Bool(load_default=False, data_key="enableBlindsT0")
    enable_proguard = fields.Bool(load_default=False, data_key="enableProGuard")
    enable_fs20 = fields.Bool(load_default=False, data_key="enableFS20")
    enable_la_crosse = fields.Bool(load_default=False, data_key="enableLaCrosse")
    enable_hideki_upm = fields.Bool(load_default=False, data_key="enableHidekiUPM")
    enable_ad_lightwave_rf = fields.Bool(load_default=False, data_key="enableADLightwaveRF")
    enable_mertik = fields.Bool(load_default=False, data_key="enableMertik")
    enable_visonic = fields.Bool(load_default=False, data_key="enableVisonic")
    enable_ati = fields.Bool(load_default=False, data_key="enableATI")
    enable_oregon_scientific = fields.Bool(load_default=False, data_key="enableOregonScientific")
    enable_meiantech = fields.Bool(load_default=False, data_key="enableMeiantech")
    enable_home_easy_eu = fields.Bool(load_default=False, data_key="enableHomeEasyEU")
    enable_ac = fields.Bool(load_default=False, data_key="enableAC")
    enable_arc = fields.Bool(load_default=False, data_key="enableARC")
    enable_x10 = fields.Bool(load_default=False, data_key="enableX10")
    enable_home_confort = fields.Bool(load_default=False, data_key="enableHomeConfort")
    enable_keeloq = fields.Bool(load_default=False, data_key="enableKEELOQ")

    @post_load
    def make_flags(self, data: Dict[str, Any], **kwargs: Any) -> ProtocolFlags:
        return ProtocolFlags(**data)


class BridgeConfigSchema(Schema):
    """Declarative validation schema for the bridge configuration."""

    class Meta:
        unknown = EXCLUDE

    # Transport selectors
    serial_port = fields.Str(load_default=None, allow_none=True, data_key="serialPort")
    bridge_id = fields.Str(load_default=None, allow_none=True, data_key="bridgeId")
    host = fields.Str(load_default=None, allow_none=True)
    port = fields.Int(load_default=DEFAULT_TCP_PORT, validate=validate.Range(min=1, max=65535))

    # Transceiver mode
    ignore_config = fields.Bool(load_default=False, data_key="ignoreConfig")
    set_mode = fields.Str(load_default=None, allow_none=True, data_key="setMode")
    transmit_power = fields.Int(
        load_default=DEFAULT_TRANSMIT_POWER,
        validate=validate.Range(min=MIN_TRANSMIT_POWER, max=MAX_TRANSMIT_POWER),
        data_key="transmitPower",
    )

    # Timing
    response_timeout = fields.Float(
        load_default=DEFAULT_RESPONSE_TIMEOUT, validate=validate.Range(min=0.01), data_key="responseTimeout"
    )
    reset_delay = fields.Float(load_default=DEFAULT_RESET_DELAY, validate=validate.Range(min=0.0), data_key="resetDelay")
    check_interval = fields.Float(
        load_default=DEFAULT_CHECK_INTERVAL, validate=validate.Range(min=0.01), data_key="checkInterval"
    )
    connect_timeout = fields.Float(
        load_default=DEFAULT_CONNECT_TIMEOUT, validate=validate.Range(min=0.01), data_key="connectTimeout"
    )

    uid = fields.Str(load_default=DEFAULT_BRIDGE_UID, validate=validate.Length(min=1))
    debug_logging = fields.Bool(load_default=False, data_key="debug")

    @pre_load
    def normalise_keys(self, data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        """Accept snake_case spellings and split out the protocol flags."""
        flag_keys = {f.data_key or name for name, f in ProtocolFlagsSchema().fields.items()}
        flag_aliases = {name: f.data_key for name, f in ProtocolFlagsSchema().fields.items() if f.data_key}
        own_aliases = {name: f.data_key for name, f in self.fields.items() if f.data_key}

        normalised: Dict[str, Any] = {}
        protocols: Dict[str, Any] = dict(data.get("protocols") or {})
        for key, value in data.items():
            if key == "protocols":
                continue
            if key in flag_aliases or key in flag_keys:
                protocols[flag_aliases.get(key, key)] = value
                continue
            normalised[own_aliases.get(key, key)] = value

        normalised["protocols"] = {flag_aliases.get(k, k): v for k, v in protocols.items()}
        return normalised

    protocols = fields.Nested(ProtocolFlagsSchema, load_default=ProtocolFlags)

    @post_load
    def make_config(self, data: Dict[str, Any], **kwargs: Any) -> BridgeConfig:
        try:
            return BridgeConfig(**data)
        except ConfigurationError as exc:
            raise ValidationError(str(exc)) from exc


__all__ = ["BridgeConfigSchema", "ProtocolFlagsSchema"]
