import base64
import json

import pytest
from sqlalchemy import func, select

from wonderlens import storage
from wonderlens.inference.prompts import UNRECOGNIZED_MESSAGE
from wonderlens.models import Device, LLMResponse, Scan
from wonderlens.routes import analyze

IMAGE_B64 = base64.b64encode(b"\xff\xd8\xff\xe0fake-jpeg-bytes").decode()
IMAGE_DATA_URL = f"data:image/jpeg;base64,{IMAGE_B64}"

LENSES = {
    "object": "Banana",
    "lenses": [
        {"name": "Core Identity", "text": "A banana is a long yellow fruit."},
        {"name": "How It Works", "text": "It ripens as starch turns to sugar."},
        {"name": "Fun Fact", "text": "Bananas are berries!"},
        {"name": "Ecosystem Role", "text": "Banana flowers feed bats and bees."},
        {"name": "Math & Patterns", "text": "Count the bananas in one bunch."},
    ],
}


async def _count(session_factory, model):
    async with session_factory() as s:
        return (await s.execute(select(func.count()).select_from(model))).scalar_one()


async def _scans(session_factory):
    async with session_factory() as s:
        return list((await s.execute(select(Scan))).scalars().all())


@pytest.mark.asyncio
async def test_missing_image_is_rejected_without_side_effects(client, session_factory, dummy_s3, fake_openai):
    r = await client.post("/api/analyze-image", json={"child_age": 7, "child_country": "in"})
    assert r.status_code == 400
    assert r.json()["error"] == "No image provided"

    r = await client.post("/api/analyze-image", json={"image": ""})
    assert r.status_code == 400

    assert dummy_s3.put_calls == []
    assert fake_openai.calls == []
    assert await _count(session_factory, Scan) == 0


@pytest.mark.asyncio
async def test_analyze_image_success_persists_scan_device_and_response(client, session_factory, dummy_s3, fake_openai):
    fake_openai.reply = json.dumps(LENSES)

    r = await client.post(
        "/api/analyze-image",
        json={
            "image": IMAGE_DATA_URL,
            "child_age": 8,
            "child_country": "in",
            "device_info": {"deviceId": "dev-1", "deviceType": "web", "osVersion": "iOS 17", "appVersion": "1.0.0"},
        },
    )
    assert r.status_code == 200
    assert r.json() == LENSES

    assert len(dummy_s3.put_calls) == 1
    put = dummy_s3.put_calls[0]
    assert put["ContentType"] == "image/jpeg"
    assert put["IfNoneMatch"] == "*"
    assert put["Key"].startswith("anonymous_") and put["Key"].endswith(".jpg")
    assert put["Body"] == base64.b64decode(IMAGE_B64)

    async with session_factory() as s:
        device = (await s.execute(select(Device))).scalar_one()
        scan = (await s.execute(select(Scan))).scalar_one()
        response = (await s.execute(select(LLMResponse))).scalar_one()

    assert device.device_unique_id == "dev-1"
    assert device.device_type == "web"
    assert scan.device_id == device.id
    assert scan.child_age == 8
    assert scan.child_country == "in"
    assert scan.image_size_kb == round(len(IMAGE_DATA_URL) / 1024)
    assert scan.image_url == storage.public_url(put["Key"])
    assert response.scan_id == scan.id
    assert response.response_json == LENSES


@pytest.mark.asyncio
async def test_model_is_called_with_prompt_image_and_sampling(client, dummy_s3, fake_openai):
    fake_openai.reply = json.dumps(LENSES)

    r = await client.post("/api/analyze-image", json={"image": IMAGE_B64, "child_age": 6, "child_country": "us"})
    assert r.status_code == 200

    call = fake_openai.calls[0]
    assert call["model"] == "gpt-4.1"
    assert call["max_tokens"] == 700
    assert call["temperature"] == 0.7
    assert call["top_p"] == 0.9

    system, user = call["messages"]
    assert system["role"] == "system"
    assert "6" in system["content"] and "us" in system["content"]
    assert user["content"][0]["image_url"]["url"] == IMAGE_DATA_URL


@pytest.mark.asyncio
async def test_unrecognized_sentinel_is_passed_through(client, session_factory, dummy_s3, fake_openai):
    sentinel = {"object": "unrecognized", "message": UNRECOGNIZED_MESSAGE}
    fake_openai.reply = json.dumps(sentinel)

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL})
    assert r.status_code == 200
    assert r.json() == sentinel
    assert await _count(session_factory, LLMResponse) == 1


@pytest.mark.asyncio
async def test_prose_wrapped_json_is_recovered(client, dummy_s3, fake_openai):
    fake_openai.reply = "Here you go!\n```json\n" + json.dumps(LENSES) + "\n```"

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL})
    assert r.status_code == 200
    assert r.json()["object"] == "Banana"


@pytest.mark.asyncio
async def test_unparseable_reply_returns_and_stores_error_shape(client, session_factory, dummy_s3, fake_openai):
    fake_openai.reply = "Sorry, I can't look at that picture."

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL})
    assert r.status_code == 200
    assert r.json() == {"error": "Could not parse response"}

    async with session_factory() as s:
        response = (await s.execute(select(LLMResponse))).scalar_one()
    assert response.response_json == {"error": "Could not parse response"}


@pytest.mark.asyncio
async def test_llm_failure_is_500_and_scan_survives(client, session_factory, dummy_s3, fake_openai):
    fake_openai.error = RuntimeError("upstream down")

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL, "child_age": 9})
    assert r.status_code == 500
    assert r.json()["error"] == "OpenAI API error"

    assert len(dummy_s3.put_calls) == 1
    assert await _count(session_factory, Scan) == 1
    assert await _count(session_factory, LLMResponse) == 0


@pytest.mark.asyncio
async def test_upload_failure_is_500_and_nothing_is_recorded(client, session_factory, dummy_s3, fake_openai):
    dummy_s3.put_error = RuntimeError("PreconditionFailed")

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL})
    assert r.status_code == 500
    assert r.json()["error"] == "Failed to upload image"

    assert fake_openai.calls == []
    assert await _count(session_factory, Scan) == 0


@pytest.mark.asyncio
async def test_same_device_id_reuses_one_device_row(client, session_factory, dummy_s3, fake_openai):
    fake_openai.reply = json.dumps(LENSES)
    body = {"image": IMAGE_DATA_URL, "device_info": {"deviceId": "dev-same", "deviceType": "web"}}

    for _ in range(2):
        r = await client.post("/api/analyze-image", json=body)
        assert r.status_code == 200

    assert await _count(session_factory, Device) == 1
    scans = await _scans(session_factory)
    assert len(scans) == 2
    assert scans[0].device_id is not None
    assert scans[0].device_id == scans[1].device_id


@pytest.mark.asyncio
async def test_scan_without_device_info_has_no_device(client, session_factory, dummy_s3, fake_openai):
    fake_openai.reply = json.dumps(LENSES)

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL, "user_id": "kid-42"})
    assert r.status_code == 200

    assert await _count(session_factory, Device) == 0
    (scan,) = await _scans(session_factory)
    assert scan.device_id is None
    assert scan.user_id == "kid-42"
    assert dummy_s3.put_calls[0]["Key"].startswith("kid-42_")


@pytest.mark.asyncio
async def test_response_save_failure_still_returns_content(client, session_factory, dummy_s3, fake_openai, monkeypatch):
    fake_openai.reply = json.dumps(LENSES)

    async def _broken_save(db, scan_id, response_json):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(analyze, "save_llm_response", _broken_save)

    r = await client.post("/api/analyze-image", json={"image": IMAGE_DATA_URL})
    assert r.status_code == 200
    assert r.json() == LENSES
    assert await _count(session_factory, Scan) == 1
    assert await _count(session_factory, LLMResponse) == 0
