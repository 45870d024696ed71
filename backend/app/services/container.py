"""
Service container – wires the store, inference client and resolvers once
per app and hands them to the routes through ``app.extensions``.
"""

from dataclasses import dataclass

from flask import current_app

from app.services.ai_client import AIClient
from app.services.chat_relay import ChatRelay
from app.services.drug_resolver import DrugResolver
from app.services.graph_projector import GraphProjector
from app.services.interaction_resolver import InteractionResolver
from app.services.record_store import RecordStore

EXTENSION_KEY = "pillgraph"


@dataclass
class Services:
    store: RecordStore
    ai: AIClient
    drugs: DrugResolver
    interactions: InteractionResolver
    graph: GraphProjector
    chat: ChatRelay


def build_services(db, config, ai_client=None) -> Services:
    store = RecordStore(db)
    ai = ai_client if ai_client is not None else AIClient.from_config(config)
    return Services(
        store=store,
        ai=ai,
        drugs=DrugResolver(store, ai),
        interactions=InteractionResolver(store, ai),
        graph=GraphProjector(store),
        chat=ChatRelay(
            ai,
            history_limit=config.CHAT_HISTORY_LIMIT,
            max_message_length=config.CHAT_MAX_MESSAGE_LENGTH,
        ),
    )


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
