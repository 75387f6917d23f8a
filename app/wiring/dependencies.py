from functools import lru_cache
import logging

from app.core.config import settings
from app.application.ports.calendar import CalendarPort
from app.application.ports.llm import TextGeneratorPort
from app.application.ports.message_platform import MessagePlatformPort
from app.application.use_cases.availability import AvailabilityUseCase
from app.application.use_cases.dedup_gate import DeduplicationGate
from app.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from app.application.use_cases.send_reply import SendReplyUseCase
from app.application.use_cases.session_machine import SessionStateMachine
from app.application.utils.availability import AvailabilityOptions
from app.infrastructure.calendar.google_calendar import GoogleCalendar
from app.infrastructure.calendar.mock_calendar import MockCalendar
from app.infrastructure.llm.mock_llm import MockLLM
from app.infrastructure.llm.openai_llm import OpenAILLM
from app.infrastructure.store.memory_store import MemoryProcessedMessageStore, MemorySessionStore
from app.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from app.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from app.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


logger = logging.getLogger(__name__)

_DEV_ENVS = {"dev", "local", "test"}


def _is_dev() -> bool:
    return settings.ENV.lower() in _DEV_ENVS


@lru_cache
def get_llm() -> TextGeneratorPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAILLM()
    return MockLLM()


@lru_cache
def get_calendar() -> CalendarPort:
    if not settings.GOOGLE_CREDENTIALS or not settings.GOOGLE_CALENDAR_ID:
        if _is_dev():
            logger.info("Using MockCalendar (credentials missing, ENV=%s)", settings.ENV)
            return MockCalendar()
        raise ValueError("GOOGLE_CREDENTIALS and GOOGLE_CALENDAR_ID are required outside dev.")
    return GoogleCalendar()


@lru_cache
def get_message_platform() -> MessagePlatformPort:
    if not settings.WHATSAPP_TOKEN or not settings.WHATSAPP_PHONE_NUMBER_ID:
        if _is_dev():
            logger.info("Using MockWhatsAppPlatform (token missing, ENV=%s)", settings.ENV)
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send replies.")

    logger.info("Using real WhatsAppPlatform")
    client = WhatsAppClient(
        access_token=settings.WHATSAPP_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        api_version=settings.META_GRAPH_API_VERSION,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )
    return WhatsAppPlatform(client=client)


@lru_cache
def get_session_store() -> MemorySessionStore:
    return MemorySessionStore()


@lru_cache
def get_processed_store() -> MemoryProcessedMessageStore:
    return MemoryProcessedMessageStore(
        ttl_seconds=settings.DEDUP_TTL_SECONDS,
        max_entries=settings.DEDUP_MAX_ENTRIES,
    )


def get_availability_use_case() -> AvailabilityUseCase:
    options = AvailabilityOptions(
        working_hours=(settings.WORKING_HOURS_START, settings.WORKING_HOURS_END),
        slot_interval_minutes=settings.SLOT_INTERVAL_MINUTES,
        timezone=settings.BUSINESS_TIMEZONE,
    )
    return AvailabilityUseCase(
        calendar=get_calendar(),
        options=options,
        window_days=settings.AVAILABILITY_WINDOW_DAYS,
    )


@lru_cache
def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    # cached: the per-correspondent locks live on this instance
    machine = SessionStateMachine(
        store=get_session_store(),
        availability=get_availability_use_case(),
        appointment_title=settings.APPOINTMENT_TITLE,
        business_name=settings.BUSINESS_NAME,
        history_limit=settings.HISTORY_LIMIT,
        text_generator=get_llm(),
    )
    return HandleIncomingMessageUseCase(
        gate=DeduplicationGate(
            store=get_processed_store(),
            max_age_seconds=settings.MESSAGE_MAX_AGE_SECONDS,
        ),
        machine=machine,
        calendar=get_calendar(),
        send_reply=SendReplyUseCase(
            platform=get_message_platform(),
            auto_reply_enabled=settings.AUTO_REPLY_ENABLED,
        ),
    )
