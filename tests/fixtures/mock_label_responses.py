"""
Mock openFDA drug label responses for testing
"""

from copy import deepcopy
from typing import Any, Dict, List

WARFARIN_LABEL: Dict[str, Any] = {
    "id": "warfarin-label-1",
    "openfda": {
        "brand_name": ["Coumadin"],
        "generic_name": ["WARFARIN SODIUM"],
        "manufacturer_name": ["Bristol-Myers Squibb"],
        "spl_id": ["spl-warfarin-1"],
    },
    "boxed_warning": [
        "WARNING: BLEEDING RISK. Warfarin can cause major or fatal bleeding. "
        "Monitor INR regularly in all treated patients."
    ],
    "indications_and_usage": [
        "Warfarin is indicated for prophylaxis and treatment of venous thrombosis and pulmonary embolism."
    ],
    "contraindications": ["Pregnancy, except in women with mechanical heart valves. Hemorrhagic tendencies."],
    "warnings_and_cautions": ["Hemorrhage: warfarin can cause major or fatal bleeding."],
    "adverse_reactions": [
        "The most common adverse reactions are fatal and nonfatal hemorrhage from any tissue or organ."
    ],
    "dosage_and_administration": ["Individualize dosing according to INR response."],
}

IBUPROFEN_LABEL: Dict[str, Any] = {
    "id": "ibuprofen-label-1",
    "openfda": {
        "brand_name": ["Advil"],
        "generic_name": ["IBUPROFEN"],
        "manufacturer_name": ["Pfizer Consumer Healthcare"],
    },
    "indications_and_usage": ["Temporarily relieves minor aches and pains due to headache and backache."],
    "warnings": [
        "Heart attack and stroke warning: NSAIDs, except aspirin, increase the risk of heart attack, "
        "heart failure, and stroke."
    ],
    "adverse_reactions": ["Stomach bleeding warning. Cardiovascular side effects were reported in trial NCT00346216."],
}

EMPTY_LABEL: Dict[str, Any] = {
    "id": "empty-label-1",
    "openfda": {"brand_name": ["Placebo Tablet"]},
    "spl_product_data_elements": ["lactose"],
}


def label_payload(labels: List[Dict[str, Any]], total: int = None, skip: int = 0, limit: int = 50) -> Dict[str, Any]:
    """Wrap label records the way the drug label endpoint does."""
    return {
        "meta": {
            "disclaimer": "Test disclaimer",
            "last_updated": "2024-01-01",
            "results": {"skip": skip, "limit": limit, "total": len(labels) if total is None else total},
        },
        "results": deepcopy(labels),
    }


COUNT_PAYLOAD: Dict[str, Any] = {
    "meta": {"disclaimer": "Test disclaimer"},
    "results": [
        {"term": "PFIZER LABORATORIES DIV PFIZER INC", "count": 1200},
        {"term": "BRISTOL-MYERS SQUIBB", "count": 340},
    ],
}

NOT_FOUND_PAYLOAD: Dict[str, Any] = {"error": {"code": "NOT_FOUND", "message": "No matches found!"}}
