"""Client construction: auth calls never share a client with other requests."""

from app.database import supabase_client


def test_auth_clients_are_created_per_call(monkeypatch):
    created = []

    def fake_create_client(url, key, options=None):
        created.append(options)
        return object()

    monkeypatch.setattr(supabase_client, "create_client", fake_create_client)

    first = supabase_client.get_auth_client()
    second = supabase_client.get_auth_client()

    assert first is not second
    assert len(created) == 2
    assert all(not options.persist_session and not options.auto_refresh_token for options in created)
