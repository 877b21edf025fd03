"""Builders for admin case documents used across the tests"""
from typing import Any, Dict, Optional


def person(name: str, aadhaar: Optional[str] = None, **overrides) -> Dict[str, Any]:
    data = {
        "person_name": name,
        "aadhaar_number": aadhaar,
        "phone_number": "+91-98100-00000",
        "person_address": "12 Residency Road, Bengaluru",
        "person_gender": "MALE",
        "person_dob": "1985-04-12",
    }
    data.update(overrides)
    return data


def document(name: str, url: str, document_type: str = "FIR", **overrides) -> Dict[str, Any]:
    data = {
        "document_name": name,
        "document_type": document_type,
        "document_date": "2024-01-06",
        "document_content_url": url,
    }
    data.update(overrides)
    return data


def authority(global_id: str, name: str = "Delhi Police", authority_type: str = "POLICE") -> Dict[str, Any]:
    return {
        "authority_name": name,
        "authority_type": authority_type,
        "global_id": global_id,
    }


def incident(location: str = "Connaught Place, New Delhi", **overrides) -> Dict[str, Any]:
    data = {
        "incident_date_from": "2024-01-05",
        "incident_date_to": "2024-01-05",
        "incident_location": location,
        "incident_status": "REPORTED",
        "latitude": 28.6315,
        "longitude": 77.2167,
        "victims": [],
        "witnesses": [],
        "report": None,
    }
    data.update(overrides)
    return data


def evidence(name: str = "Kitchen knife", **overrides) -> Dict[str, Any]:
    data = {
        "evidence_name": name,
        "evidence_description": "Recovered near the scene",
        "evidence_date_found": "2024-01-07",
        "evidence_location": "Connaught Place, New Delhi",
    }
    data.update(overrides)
    return data


def make_case(**overrides) -> Dict[str, Any]:
    """A case with at least one of every nested entity"""
    accused = person("Vikram Rao", "1111-2222-3333")
    data = {
        "case_name": "State v. Vikram Rao",
        "case_status": "IN_PROGRESS",
        "case_type": "ASSAULT",
        "case_description": "Assault outside a market",
        "case_date_filed": "2024-01-10",
        "case_date_closed": None,
        "incidents": [
            incident(
                victims=[
                    {"person": person("Ravi Kumar", "4444-5555-6666"), "comments": "Injured"},
                    {"person": person("Anita Singh", person_gender="FEMALE"), "comments": None},
                ],
                witnesses=[
                    {"person": person("Meera Nair", person_gender="FEMALE"), "comments": "Saw the attack"},
                ],
                report=document("FIR 117/2024", "https://records.example.org/fir/117-2024.pdf"),
            ),
        ],
        "evidences": [evidence()],
        "sentences": [
            {
                "sentence_date": "2024-06-01",
                "sentence_type": "PRISON",
                "sentence_duration": 365,
                "sentenced_people": [
                    {
                        "person": accused,
                        "compliance_status": "IN_PROGRESS",
                        "compliance_notes": None,
                        "supervision_level": "MEDIUM",
                        "rehabilitation_status": "NOT_STARTED",
                        "appeal_status": "FILED",
                    },
                ],
            },
        ],
        "investigating_authorities": [
            {"authority": authority("DL-POLICE-01"), "date_from": "2024-01-05", "date_to": None},
        ],
        "proceedings": [
            {
                "proceeding_type": "TRIAL",
                "proceeding_status": "IN_PROGRESS",
                "date_started": "2024-03-01",
                "date_ended": None,
                "court_authority": authority("DL-HC-01", "Delhi High Court", "HIGH COURT"),
                "presiding_officers": "Justice A. Mehta",
                "proceeding_notes": "First hearing",
                "judge": person("A. Mehta", "7777-8888-9999"),
                "transcript": document(
                    "Hearing transcript 1", "https://records.example.org/tx/1.pdf", "ADJUNCTION"
                ),
                "other_documents": [
                    document("Charge sheet", "https://records.example.org/cs/117.pdf", "OTHER"),
                ],
                "plaintiffs": [person("Public Prosecutor", "1212-3434-5656")],
                "plaintiff_advocates": [person("S. Iyer", "2323-4545-6767")],
                "defendants": [accused],
                "defendant_advocates": [person("R. Kapoor", "3434-5656-7878")],
            },
        ],
    }
    data.update(overrides)
    return data


def strip_ids(value: Any) -> Any:
    """Drop every `id` key, for comparing read output with a submitted document"""
    if isinstance(value, dict):
        return {key: strip_ids(item) for key, item in value.items() if key != "id"}
    if isinstance(value, list):
        return [strip_ids(item) for item in value]
    return value
