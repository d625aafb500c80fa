from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_categorize_endpoint(api_client, llm, citizen, headers_for):
	llm.json_responses.append({"category": "Infrastructure", "priority": "high", "tags": ["pothole"], "confidence": 0.9})

	resp = await api_client.post(
		"/ai/categorize",
		json={"title": "Pothole", "description": "Huge pothole on Elm"},
		headers=headers_for(citizen),
	)

	assert resp.status_code == 200
	assert resp.json() == {"category": "infrastructure", "priority": "high", "tags": ["pothole"], "confidence": 0.9}


@pytest.mark.asyncio
async def test_moderate_omits_empty_fields(api_client, llm, citizen, headers_for):
	llm.json_responses.append({"is_appropriate": True})

	resp = await api_client.post("/ai/moderate", json={"content": "Great meeting"}, headers=headers_for(citizen))

	assert resp.json() == {"is_appropriate": True}


@pytest.mark.asyncio
async def test_summarize_is_admin_only(api_client, repo, llm, citizen, admin, headers_for):
	issue = repo.add_issue(reporter_id=citizen.id)
	llm.text_responses.append("Residents report a pothole.")

	denied = await api_client.post("/ai/summarize", json={"issue_id": str(issue.id)}, headers=headers_for(citizen))
	allowed = await api_client.post("/ai/summarize", json={"issue_id": str(issue.id)}, headers=headers_for(admin))

	assert denied.status_code == 403
	assert allowed.json() == {"summary": "Residents report a pothole."}


@pytest.mark.asyncio
async def test_ai_rate_limit_surfaces_as_429(api_client, llm, citizen, headers_for, monkeypatch):
	from civichub.settings import settings

	monkeypatch.setattr(settings, "ai_rate_limit_per_minute", 1)
	llm.json_responses.extend([{"is_appropriate": True}, {"is_appropriate": True}])

	first = await api_client.post("/ai/moderate", json={"content": "one"}, headers=headers_for(citizen))
	second = await api_client.post("/ai/moderate", json={"content": "two"}, headers=headers_for(citizen))

	assert first.status_code == 200
	assert second.status_code == 429
	assert second.json()["error"] == "ai_rate_limited"
