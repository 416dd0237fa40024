from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from app.config.onboarding_config import next_step, previous_step, is_known_step, COMPLETE_STEP
from app.modules.onboarding.service import OnboardingService

API = "/api/v1/onboarding"


def test_step_order():
    assert next_step("organization") == "profile"
    assert next_step("invite") == "workspace"
    assert next_step("workspace") == COMPLETE_STEP
    assert previous_step("profile") == "organization"
    assert previous_step(COMPLETE_STEP) == "workspace"
    assert is_known_step("complete")
    assert not is_known_step("billing")


def test_start_new_user_begins_with_organization(client, login):
    _, headers = login()
    resp = client.post(f"{API}/start", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["progress"]["current_step"] == "organization"
    assert body["progress"]["completed_steps"] == []
    assert body["organization"] is None
    assert body["invited"] is False


def test_start_is_idempotent(client, login, fake_supabase):
    _, headers = login()
    client.post(f"{API}/start", headers=headers)
    client.post(f"{API}/organization", json={"name": "Acme Inc"}, headers=headers)

    resp = client.post(f"{API}/start", headers=headers)
    assert resp.json()["progress"]["current_step"] == "profile"
    assert len(fake_supabase.rows("onboarding_progress")) == 1


def test_start_with_existing_organization_skips_to_profile(client, login, make_organization):
    user, headers = login()
    organization = make_organization(user.id)

    body = client.post(f"{API}/start", headers=headers).json()
    assert body["progress"]["current_step"] == "profile"
    assert body["progress"]["completed_steps"] == ["organization"]
    assert body["organization"]["id"] == organization["id"]


def test_progress_not_found_before_start(client, login):
    _, headers = login()
    assert client.get(f"{API}/progress", headers=headers).status_code == 404


def test_full_wizard_for_organization_owner(client, login, fake_supabase):
    user, headers = login("ada@acme.com")
    client.post(f"{API}/start", headers=headers)

    resp = client.post(f"{API}/organization", json={"name": "Acme Inc", "domain": "Acme.COM"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["organization"]["domain"] == "acme.com"
    assert body["progress"]["current_step"] == "profile"
    assert body["progress"]["completed_steps"] == ["organization"]
    member = fake_supabase.rows("organization_members")[0]
    assert member["user_id"] == user.id and member["is_owner"] is True

    resp = client.post(f"{API}/profile", json={"full_name": " Ada  King Lovelace ", "job_title": "CTO"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["invited"] is False
    assert body["profile"]["first_name"] == "Ada"
    assert body["profile"]["last_name"] == "King Lovelace"
    assert body["profile"]["organization_id"] == member["organization_id"]
    assert body["progress"]["current_step"] == "invite"

    resp = client.post(f"{API}/invite", json={"emails": ["Bob@Acme.com", "bob@acme.com"]}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] == ["bob@acme.com"]
    assert body["failed"] == []
    assert body["progress"]["current_step"] == "workspace"
    email, options = fake_supabase.auth.reset_requests[0]
    assert email == "bob@acme.com"
    assert "invitation=true" in options["redirect_to"]
    assert f"ib={user.id}" in options["redirect_to"]

    resp = client.post(f"{API}/workspace", json={"name": "  Design  "}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["workspace"]["name"] == "Design"
    assert body["workspace"]["created_by"] == user.id
    assert body["progress"]["current_step"] == "complete"
    assert body["progress"]["completed_steps"] == ["organization", "profile", "invite", "workspace"]


def test_organization_domain_defaults_to_email_domain(client, login):
    _, headers = login("grace@navy.mil")
    body = client.post(f"{API}/organization", json={"name": "US Navy"}, headers=headers).json()
    assert body["organization"]["domain"] == "navy.mil"


@pytest.mark.parametrize("payload", [
    {"name": "A"},
    {"name": "Acme!"},
    {"name": "Acme", "domain": "ac"},
    {"name": "Acme", "domain": "acme_corp.com"},
])
def test_organization_step_rejects_invalid_input(client, login, payload):
    _, headers = login()
    assert client.post(f"{API}/organization", json=payload, headers=headers).status_code == 422


def test_organization_step_updates_owned_organization(client, login, fake_supabase):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)
    body = client.post(f"{API}/organization", json={"name": "Acme Labs"}, headers=headers).json()
    assert body["organization"]["name"] == "Acme Labs"
    assert len(fake_supabase.rows("organizations")) == 1


def test_organization_step_forbidden_for_plain_member(client, login, make_organization, fake_supabase):
    owner, _ = login("owner@acme.com")
    organization = make_organization(owner.id)
    member, headers = login("member@acme.com")
    fake_supabase.seed("organization_members", {
        "user_id": member.id, "organization_id": organization["id"], "role": "member", "is_owner": False
    })
    resp = client.post(f"{API}/organization", json={"name": "Hijacked"}, headers=headers)
    assert resp.status_code == 403


def test_profile_step_requires_organization(client, login):
    _, headers = login()
    resp = client.post(f"{API}/profile", json={"full_name": "Ada Lovelace"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing organization information"


def test_profile_step_rejects_short_name(client, login):
    _, headers = login()
    assert client.post(f"{API}/profile", json={"full_name": " A "}, headers=headers).status_code == 422


def test_invited_user_joins_on_start_and_finishes_after_profile(client, login, make_organization, fake_supabase):
    owner, _ = login("owner@acme.com")
    organization = make_organization(owner.id)
    fake_supabase.seed("invitations", {
        "email": "bob@acme.com",
        "organization_id": organization["id"],
        "invited_by": "owner@acme.com",
        "accepted": False,
        "auto_join": True,
        "expires_at": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
    })
    bob, headers = login("bob@acme.com")

    body = client.post(f"{API}/start", headers=headers).json()
    assert body["invited"] is True
    assert body["progress"]["current_step"] == "profile"
    assert body["progress"]["completed_steps"] == ["organization"]
    assert body["organization"]["id"] == organization["id"]
    assert fake_supabase.rows("invitations")[0]["accepted"] is True

    body = client.post(f"{API}/profile", json={"full_name": "Bob Builder"}, headers=headers).json()
    assert body["invited"] is True
    assert body["profile"]["organization_id"] == organization["id"]
    assert body["progress"]["current_step"] == "complete"


def test_invited_user_without_auto_join_joins_on_profile(client, login, make_organization, fake_supabase):
    owner, _ = login("owner@acme.com")
    organization = make_organization(owner.id)
    fake_supabase.seed("invitations", {
        "email": "carol@acme.com",
        "organization_id": organization["id"],
        "accepted": False,
        "auto_join": False,
        "expires_at": None,
    })
    carol, headers = login("carol@acme.com")

    body = client.post(f"{API}/start", headers=headers).json()
    assert body["progress"]["current_step"] == "profile"
    assert body["organization"] is None

    body = client.post(f"{API}/profile", json={"full_name": "Carol Danvers"}, headers=headers).json()
    assert body["progress"]["current_step"] == "complete"
    service = OnboardingService(fake_supabase)
    assert service.organizations.is_member(carol.id, organization["id"])
    assert fake_supabase.rows("invitations")[0]["accepted"] is True


def test_invite_step_stays_put_when_every_email_fails(client, login, fake_supabase):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)
    client.post(f"{API}/profile", json={"full_name": "Ada Lovelace"}, headers=headers)
    fake_supabase.auth.failing_emails.add("bob@acme.com")

    body = client.post(f"{API}/invite", json={"emails": ["bob@acme.com"]}, headers=headers).json()
    assert body["success"] == []
    assert body["failed"] == ["bob@acme.com"]
    assert body["progress"]["current_step"] == "invite"


def test_invite_step_rejects_empty_and_malformed_lists(client, login):
    _, headers = login()
    assert client.post(f"{API}/invite", json={"emails": []}, headers=headers).status_code == 422
    assert client.post(f"{API}/invite", json={"emails": ["not-an-email"]}, headers=headers).status_code == 422


def test_skip_steps_complete_the_wizard(client, login):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)
    client.post(f"{API}/profile", json={"full_name": "Ada Lovelace"}, headers=headers)

    progress = client.post(f"{API}/invite/skip", headers=headers).json()
    assert progress["current_step"] == "workspace"
    progress = client.post(f"{API}/workspace/skip", headers=headers).json()
    assert progress["current_step"] == "complete"
    assert progress["completed_steps"] == ["organization", "profile", "invite", "workspace"]


def test_workspace_step_in_foreign_organization_is_forbidden(client, login, make_organization):
    owner, _ = login("owner@other.com")
    other = make_organization(owner.id, name="Other", domain="other.com")
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)

    resp = client.post(f"{API}/workspace", json={"name": "Design", "organization_id": other["id"]}, headers=headers)
    assert resp.status_code == 403


def test_navigate_back_to_completed_step(client, login):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)

    resp = client.post(f"{API}/navigate", json={"step": "organization"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["current_step"] == "organization"
    assert resp.json()["completed_steps"] == ["organization"]

    resp = client.post(f"{API}/navigate", json={"step": "workspace"}, headers=headers)
    assert resp.status_code == 409


def test_navigate_before_start(client, login):
    _, headers = login()
    assert client.post(f"{API}/navigate", json={"step": "organization"}, headers=headers).status_code == 404


def test_navigate_to_unknown_step(client, login):
    _, headers = login()
    assert client.post(f"{API}/navigate", json={"step": "billing"}, headers=headers).status_code == 422


def test_save_progress_dedupes_completed_steps(client, login):
    _, headers = login()
    resp = client.put(f"{API}/progress", json={
        "current_step": "invite",
        "completed_steps": ["organization", "profile", "organization"]
    }, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["completed_steps"] == ["organization", "profile"]
    assert client.get(f"{API}/progress", headers=headers).json()["current_step"] == "invite"


def test_save_progress_rejects_unknown_step(client, login, fake_supabase):
    _, headers = login()
    resp = client.put(f"{API}/progress", json={"current_step": "billing"}, headers=headers)
    assert resp.status_code == 422

    with pytest.raises(HTTPException) as exc:
        OnboardingService(fake_supabase).save_progress("user-1", "profile", ["billing"])
    assert exc.value.status_code == 422


def test_progress_write_failure_is_reported(fake_supabase):
    fake_supabase.failing_tables.add("onboarding_progress")
    with pytest.raises(HTTPException) as exc:
        OnboardingService(fake_supabase).save_progress("user-1", "profile", [])
    assert exc.value.status_code == 500


def test_steps_catalogue(client):
    steps = client.get(f"{API}/steps").json()
    assert [step["id"] for step in steps] == ["organization", "profile", "invite", "workspace"]


def test_onboarding_requires_authentication(client):
    assert client.post(f"{API}/start").status_code in (401, 403)
    assert client.post(f"{API}/start", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_back_moves_to_previous_step(client, login):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)
    client.post(f"{API}/profile", json={"full_name": "Ada Lovelace"}, headers=headers)

    assert client.post(f"{API}/back", headers=headers).json()["current_step"] == "profile"
    assert client.post(f"{API}/back", headers=headers).json()["current_step"] == "organization"
    assert client.post(f"{API}/back", headers=headers).json()["current_step"] == "organization"


def _finish_wizard(client, headers):
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)
    client.post(f"{API}/profile", json={"full_name": "Ada Lovelace"}, headers=headers)
    client.post(f"{API}/invite/skip", headers=headers)
    return client.post(f"{API}/workspace/skip", headers=headers).json()


def test_repeated_steps_after_completion_keep_progress(client, login):
    _, headers = login()
    assert _finish_wizard(client, headers)["current_step"] == "complete"

    assert client.post(f"{API}/invite/skip", headers=headers).json()["current_step"] == "complete"
    assert client.post(f"{API}/workspace/skip", headers=headers).json()["current_step"] == "complete"
    body = client.post(f"{API}/profile", json={"full_name": "Ada King"}, headers=headers).json()
    assert body["progress"]["current_step"] == "complete"
    body = client.post(f"{API}/organization", json={"name": "Acme Labs"}, headers=headers).json()
    assert body["progress"]["current_step"] == "complete"
    assert body["progress"]["completed_steps"] == ["organization", "profile", "invite", "workspace"]


def test_resubmitting_an_earlier_step_does_not_rewind(client, login):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)
    client.post(f"{API}/profile", json={"full_name": "Ada Lovelace"}, headers=headers)

    body = client.post(f"{API}/organization", json={"name": "Acme Labs"}, headers=headers).json()
    assert body["progress"]["current_step"] == "invite"


def test_skips_out_of_order_are_rejected(client, login):
    _, headers = login()
    client.post(f"{API}/start", headers=headers)

    resp = client.post(f"{API}/workspace/skip", headers=headers)
    assert resp.status_code == 409
    assert client.post(f"{API}/invite/skip", headers=headers).status_code == 409
    progress = client.get(f"{API}/progress", headers=headers).json()
    assert progress["current_step"] == "organization"
    assert progress["completed_steps"] == []


def test_skip_before_start(client, login):
    _, headers = login()
    assert client.post(f"{API}/invite/skip", headers=headers).status_code == 404


def test_workspace_step_out_of_order_creates_nothing(client, login, fake_supabase):
    _, headers = login()
    client.post(f"{API}/organization", json={"name": "Acme"}, headers=headers)

    resp = client.post(f"{API}/workspace", json={"name": "Design"}, headers=headers)
    assert resp.status_code == 409
    assert fake_supabase.rows("workspaces") == []

    resp = client.post(f"{API}/invite", json={"emails": ["bob@acme.com"]}, headers=headers)
    assert resp.status_code == 409
    assert fake_supabase.auth.reset_requests == []


def test_back_from_complete_for_invited_user(client, login, make_organization, fake_supabase):
    owner, _ = login("owner@acme.com")
    organization = make_organization(owner.id)
    fake_supabase.seed("invitations", {
        "email": "bob@acme.com", "organization_id": organization["id"], "accepted": False, "expires_at": None,
    })
    _, headers = login("bob@acme.com")
    client.post(f"{API}/start", headers=headers)
    client.post(f"{API}/profile", json={"full_name": "Bob Builder"}, headers=headers)

    resp = client.post(f"{API}/back", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["current_step"] == "profile"


def test_profile_step_moves_profile_to_invited_organization(client, login, make_organization, fake_supabase):
    first_owner, _ = login("owner@first.com")
    first = make_organization(first_owner.id, name="First", domain="first.com")
    second_owner, _ = login("owner@second.com")
    second = make_organization(second_owner.id, name="Second", domain="second.com")
    bob, headers = login("bob@second.com")
    fake_supabase.seed("profiles", {"user_id": bob.id, "organization_id": first["id"], "name": "Bob"})
    fake_supabase.seed("invitations", {
        "email": "bob@second.com", "organization_id": second["id"], "accepted": False, "expires_at": None,
    })

    body = client.post(f"{API}/profile", json={"full_name": "Bob Builder"}, headers=headers).json()
    assert body["invited"] is True
    assert body["profile"]["organization_id"] == second["id"]
    assert [row["organization_id"] for row in fake_supabase.rows("profiles")] == [second["id"]]
