"""Tracker protocol constants."""

from __future__ import annotations

from enum import Enum


PROTOCOL_VENDOR = "com.snowplowanalytics.snowplow"
PROTOCOL_VERSION = "tp2"  # Tracker Protocol v2
GET_PATH = "/i"
POST_CONTENT_TYPE = "application/json; charset=utf-8"

# Iglu schemas
SCHEMA_PAYLOAD_DATA = "iglu:com.snowplowanalytics.snowplow/payload_data/jsonschema/1-0-4"
SCHEMA_CONTEXTS = "iglu:com.snowplowanalytics.snowplow/contexts/jsonschema/1-0-1"
SCHEMA_UNSTRUCT_EVENT = "iglu:com.snowplowanalytics.snowplow/unstruct_event/jsonschema/1-0-0"
SCHEMA_SCREEN_VIEW = "iglu:com.snowplowanalytics.snowplow/screen_view/jsonschema/1-0-0"
SCHEMA_TIMING = "iglu:com.snowplowanalytics.snowplow/timing/jsonschema/1-0-0"

# Event type codes
EVENT_PAGE_VIEW = "pv"
EVENT_STRUCTURED = "se"
EVENT_SELF_DESCRIBING = "ue"
EVENT_ECOMM = "tr"
EVENT_ECOMM_ITEM = "ti"


class Param:
    """Wire parameter names."""

    # Common
    EVENT = "e"
    EID = "eid"
    DEVICE_CREATED_TIMESTAMP = "dtm"
    DEVICE_SENT_TIMESTAMP = "stm"
    TRUE_TIMESTAMP = "ttm"
    PLATFORM = "p"
    APP_ID = "aid"
    NAMESPACE = "tna"
    TRACKER_VERSION = "tv"
    CONTEXT = "co"
    CONTEXT_ENCODED = "cx"
    SELF_DESCRIBING = "ue_pr"
    SELF_DESCRIBING_ENCODED = "ue_px"

    # Subject
    UID = "uid"
    RESOLUTION = "res"
    VIEWPORT = "vp"
    COLOR_DEPTH = "cd"
    TIMEZONE = "tz"
    LANGUAGE = "lang"
    IP_ADDRESS = "ip"
    USERAGENT = "ua"
    NETWORK_UID = "tnuid"
    DOMAIN_UID = "duid"
    SESSION_UID = "sid"

    # Page view
    PAGE_URL = "url"
    PAGE_TITLE = "page"
    PAGE_REFR = "refr"

    # Structured event
    SE_CATEGORY = "se_ca"
    SE_ACTION = "se_ac"
    SE_LABEL = "se_la"
    SE_PROPERTY = "se_pr"
    SE_VALUE = "se_va"

    # Ecommerce transaction
    TR_ID = "tr_id"
    TR_TOTAL = "tr_tt"
    TR_AFFILIATION = "tr_af"
    TR_TAX = "tr_tx"
    TR_SHIPPING = "tr_sh"
    TR_CITY = "tr_ci"
    TR_STATE = "tr_st"
    TR_COUNTRY = "tr_co"
    TR_CURRENCY = "tr_cu"

    # Ecommerce transaction item
    TI_ITEM_ID = "ti_id"
    TI_ITEM_SKU = "ti_sk"
    TI_ITEM_NAME = "ti_nm"
    TI_ITEM_CATEGORY = "ti_ca"
    TI_ITEM_PRICE = "ti_pr"
    TI_ITEM_QUANTITY = "ti_qu"
    TI_ITEM_CURRENCY = "ti_cu"

    # Screen view (self-describing data)
    SV_ID = "id"
    SV_NAME = "name"

    # User timing (self-describing data)
    UT_CATEGORY = "category"
    UT_VARIABLE = "variable"
    UT_TIMING = "timing"
    UT_LABEL = "label"


class DevicePlatform(str, Enum):
    """Platform the tracker is running on."""
    WEB = "web"
    MOBILE = "mob"
    DESKTOP = "pc"
    SERVER_SIDE_APP = "srv"
    GENERAL = "app"
    CONNECTED_TV = "tv"
    GAME_CONSOLE = "cnsl"
    INTERNET_OF_THINGS = "iot"
