"""
Simulate a Tally form submission against a running server.

Usage:
    python scripts/simulate_submission.py
    python scripts/simulate_submission.py --variant c_lead
    python scripts/simulate_submission.py --phone "010-9876-5432" --name "이영희" --secret s3cret
    python scripts/simulate_submission.py --submission-id sub-1 --repeat 2   # duplicate delivery
"""
import argparse
import asyncio
import logging
import uuid
from datetime import datetime, timezone

import httpx

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_URL = "http://localhost:8000"
ENDPOINTS = {
    "lead": "/api/tally/webhook",
    "c_lead": "/api/tally/c-webhook",
}


def build_payload(name: str, phone: str, question: str, submission_id: str) -> dict:
    now = datetime.now(timezone.utc).isoformat()
    return {
        "eventId": str(uuid.uuid4()),
        "eventType": "FORM_RESPONSE",
        "createdAt": now,
        "data": {
            "responseId": submission_id,
            "submissionId": submission_id,
            "respondentId": "resp-sim",
            "formId": "form-sim",
            "formName": "입시 상담 신청",
            "createdAt": now,
            "fields": [
                {"key": "question_g01o6D", "label": "학부모 성함", "type": "INPUT_TEXT", "value": name},
                {"key": "question_y6Ra5X", "label": "연락처", "type": "INPUT_PHONE_NUMBER", "value": phone},
                {
                    "key": "question_XDkbPL",
                    "label": "학생 학년",
                    "type": "MULTIPLE_CHOICE",
                    "value": ["opt-g3"],
                    "options": [{"id": "opt-g2", "text": "고2"}, {"id": "opt-g3", "text": "고3"}],
                },
                {"key": "question_zqo65M", "label": "궁금하신 점", "type": "TEXTAREA", "value": question},
                {"key": "question_utm1", "label": "utm_source", "type": "HIDDEN_FIELDS", "value": "simulator"},
            ],
        },
    }


async def simulate(variant: str, payload: dict, secret: str, repeat: int):
    headers = {"Authorization": f"Bearer {secret}"} if secret else {}
    async with httpx.AsyncClient(base_url=BASE_URL, timeout=30) as client:
        for attempt in range(repeat):
            resp = await client.post(ENDPOINTS[variant], json=payload, headers=headers)
            logger.info("Delivery %d: %s %s", attempt + 1, resp.status_code, resp.json())


def main():
    parser = argparse.ArgumentParser(description="Post a sample Tally submission")
    parser.add_argument("--variant", choices=sorted(ENDPOINTS), default="lead")
    parser.add_argument("--name", default="김민수")
    parser.add_argument("--phone", default="01012345678")
    parser.add_argument("--question", default="수시 전략 상담을 받고 싶습니다.")
    parser.add_argument("--submission-id", default=None)
    parser.add_argument("--secret", default="")
    parser.add_argument("--repeat", type=int, default=1)
    args = parser.parse_args()

    submission_id = args.submission_id or f"sim-{uuid.uuid4().hex[:8]}"
    payload = build_payload(args.name, args.phone, args.question, submission_id)
    asyncio.run(simulate(args.variant, payload, args.secret, args.repeat))


if __name__ == "__main__":
    main()
