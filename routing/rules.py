"""
Routing rules.

A rule pairs a predicate over (action item, reservation data) with a dispatch.
Rules are not mutually exclusive: the router runs every rule whose predicate
matches, in list order.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

from routing.models import ActionItem, ReservationData
from runtime.config import RoutingConfig

NEGATIVE_SENTIMENT_PHRASE = "sentiment turned negative"

Predicate = Callable[[ActionItem, Optional[ReservationData]], bool]
Action = Callable[[ActionItem, Optional[ReservationData]], Awaitable[Any]]


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    action: Action

    def matches(self, action_item: ActionItem, reservation: Optional[ReservationData]) -> bool:
        return bool(self.predicate(action_item, reservation))


def is_arrival_departure(property_code: str) -> Predicate:
    # Case-sensitive on the property code
    def predicate(action_item: ActionItem, reservation: Optional[ReservationData]) -> bool:
        return action_item.category == "ARRIVAL-DEPARTURE" and property_code in action_item.property_label
    return predicate


def is_address_request(property_code: str) -> Predicate:
    def predicate(action_item: ActionItem, reservation: Optional[ReservationData]) -> bool:
        return (action_item.category == "ADDRESS-REQUEST"
                and property_code.lower() in action_item.property_label.lower())
    return predicate


def is_negative_sentiment(action_item: ActionItem, reservation: Optional[ReservationData] = None) -> bool:
    return NEGATIVE_SENTIMENT_PHRASE in action_item.description.lower()


def for_property(property_code: str) -> Callable[[ActionItem], bool]:
    """Item filter: property label contains the code, case-insensitive"""
    def item_filter(action_item: ActionItem) -> bool:
        return property_code.upper() in action_item.property_label.upper()
    return item_filter


def negative_sentiment_for_property(property_code: str) -> Callable[[ActionItem], bool]:
    in_property = for_property(property_code)

    def item_filter(action_item: ActionItem) -> bool:
        return in_property(action_item) and is_negative_sentiment(action_item)
    return item_filter


def always(action_item: ActionItem, reservation: Optional[ReservationData] = None) -> bool:
    return True


def build_action_item_rules(notifier, config: RoutingConfig) -> List[Rule]:
    """Rule set of the main webhook. The default alert comes last and always fires"""
    return [
        Rule("arrival_departure", is_arrival_departure(config.arrival_departure_code),
             notifier.send_arrival_departure_alert),
        Rule("address_request", is_address_request(config.arrival_departure_code),
             notifier.send_address_request_alert),
        Rule("negative_sentiment", is_negative_sentiment, notifier.handle_negative_sentiment),
        Rule("default", always, notifier.send_default_alert),
    ]


def build_negative_sentiment_rules(notifier) -> List[Rule]:
    """Rule set of the negative-sentiment-only webhook"""
    return [
        Rule("negative_sentiment", is_negative_sentiment, notifier.handle_negative_sentiment),
    ]
