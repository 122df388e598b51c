"""
Shared test fixtures for unit and integration tests.
"""

import pytest
from typing import Any, Dict

from journeymap.state.render_state import StateClasses


@pytest.fixture
def state_classes() -> StateClasses:
    """State classes used by the sample journey map."""
    return StateClasses(
        initial_states=("INITIAL_IPV_JOURNEY",),
        error_states=("ERROR",),
        failure_states=("PYI_NO_MATCH",),
    )


@pytest.fixture
def sample_journey_map() -> Dict[str, Any]:
    """Small journey map covering each response type and a conditional event."""
    return {
        "INITIAL_IPV_JOURNEY": {
            "response": {"type": "page", "pageId": "page-ipv-identity-start"},
            "events": {
                "next": {"targetState": "CHECK_EXISTING_IDENTITY"},
            },
        },
        "CHECK_EXISTING_IDENTITY": {
            "response": {"type": "process", "lambda": "check-existing-identity"},
            "events": {
                "reuse": {"targetState": "IPV_SUCCESS_PAGE"},
                "next": {
                    "targetState": "DCMAW",
                    "checkIfDisabled": {
                        "dcmaw": {"targetState": "UK_PASSPORT"},
                    },
                },
                "error": {"targetState": "ERROR"},
                "fail": {"targetState": "PYI_NO_MATCH"},
            },
        },
        "DCMAW": {
            "response": {"type": "cri", "criId": "dcmaw"},
            "events": {
                "next": {"targetState": "IPV_SUCCESS_PAGE"},
                "access-denied": {"targetState": "UK_PASSPORT"},
            },
        },
        "UK_PASSPORT": {
            "response": {
                "type": "cri",
                "criId": "ukPassport",
                "context": "bank_account",
                "scope": "identityCheck",
            },
            "events": {
                "next": {"targetState": "IPV_SUCCESS_PAGE"},
                "enhanced-verification": {"targetState": "IPV_SUCCESS_PAGE"},
            },
        },
        "IPV_SUCCESS_PAGE": {
            "response": {"type": "page", "pageId": "page-ipv-success"},
        },
        "ERROR": {
            "response": {"type": "error"},
        },
        "PYI_NO_MATCH": {
            "response": {"type": "page", "pageId": "pyi-no-match"},
        },
        "RETIRED_STATE": {
            "response": {"type": "page", "pageId": "retired"},
            "events": {
                "next": {"targetState": "IPV_SUCCESS_PAGE"},
            },
        },
    }


@pytest.fixture
def sample_nested_journeys() -> Dict[str, Any]:
    """Nested journey registry with one reusable sub-journey."""
    return {
        "NINO_SUBJOURNEY": {
            "entryEvents": {
                "next": {"targetState": "NINO_START"},
            },
            "nestedJourneyStates": {
                "NINO_START": {
                    "response": {"type": "cri", "criId": "nino"},
                    "events": {
                        "next": {"targetState": "NINO_CHECK"},
                        "access-denied": {"exitEventToEmit": "denied"},
                    },
                },
                "NINO_CHECK": {
                    "response": {"type": "process", "lambda": "check-nino"},
                    "events": {
                        "met": {"exitEventToEmit": "done"},
                        "unmet": {"exitEventToEmit": "unhandled"},
                    },
                },
            },
        },
    }


@pytest.fixture
def nested_host_map() -> Dict[str, Any]:
    """Journey map that enters the NINO sub-journey from two places."""
    return {
        "INITIAL_IPV_JOURNEY": {
            "response": {"type": "page", "pageId": "page-ipv-identity-start"},
            "events": {
                "next": {"targetState": "NINO_FIRST"},
            },
        },
        "NINO_FIRST": {
            "nestedJourney": "NINO_SUBJOURNEY",
            "exitEvents": {
                "done": {"targetState": "CONFIRM_DETAILS_PAGE"},
                "denied": {"targetState": "PYI_NO_MATCH"},
            },
        },
        "CONFIRM_DETAILS_PAGE": {
            "response": {"type": "page", "pageId": "confirm-details"},
            "events": {
                "next": {"targetState": "NINO_SECOND"},
            },
        },
        "NINO_SECOND": {
            "nestedJourney": "NINO_SUBJOURNEY",
            "exitEvents": {
                "done": {"targetState": "IPV_SUCCESS_PAGE"},
            },
        },
        "IPV_SUCCESS_PAGE": {
            "response": {"type": "page", "pageId": "page-ipv-success"},
        },
        "PYI_NO_MATCH": {
            "response": {"type": "page", "pageId": "pyi-no-match"},
        },
    }
