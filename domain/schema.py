# domain/schema.py
MAGAZINE_CATEGORY_ALLOW = [
    "인공지능",
    "웹개발",
    "클라우드",
    "보안",
    "모바일",
    "데이터사이언스",
    "블록체인",
    "DevOps",
]

# -------------------- 입력 양식 스키마 --------------------
# 필수값 누락은 서비스 계층에서 ValidationError 로 판단하므로
# 여기서는 "있으면 타입이 맞는지" 만 본다.
charge_request_schema = {
    "type": "object",
    "properties": {
        "billingKey": {"type": ["string", "null"], "maxLength": 256},
        "orderName": {"type": ["string", "null"], "maxLength": 200},
        "amount": {"type": ["integer", "null"]},
        "customer": {
            "type": ["object", "null"],
            "properties": {"id": {"type": ["string", "null"], "maxLength": 255}},
        },
        "customData": {"type": ["string", "null"], "maxLength": 255},
        "idempotencyKey": {"type": ["string", "null"], "minLength": 8, "maxLength": 80},
    },
    "additionalProperties": True,
}

cancel_request_schema = {
    "type": "object",
    "properties": {
        "transactionKey": {"type": ["string", "null"], "maxLength": 128},
        "reason": {"type": ["string", "null"], "maxLength": 200},
    },
    "additionalProperties": True,
}

magazine_create_schema = {
    "type": "object",
    "properties": {
        "category": {"type": "string", "enum": MAGAZINE_CATEGORY_ALLOW},
        "title": {"type": "string", "minLength": 1, "maxLength": 200},
        "description": {"type": "string", "minLength": 1, "maxLength": 500},
        "content": {"type": "string", "minLength": 1, "maxLength": 50000},
        "tags": {
            "type": ["array", "null"],
            "items": {"type": "string", "maxLength": 30},
            "maxItems": 10,
        },
        "image_url": {"type": ["string", "null"], "maxLength": 512},
    },
    "required": ["category", "title", "description", "content"],
    "additionalProperties": False,
}
