from app.utils.slug import slugify
from conftest import make_ad

MISSING_AD = "5f1c3a52-6a1e-4c4f-9d2e-0d3b8f7e9a11"


def test_slugify_strips_accents_and_punctuation():
    assert slugify("Cálculo  Vol. 2 -- Stewart!") == "calculo-vol-2-stewart"
    assert slugify("   ") == ""


def test_generate_link(client, session, users, monkeypatch):
    monkeypatch.setenv("BASE_URL", "https://market.example/")
    ad = make_ad(session, title="Mesa de estudo")

    data = client.get(f"/share/generate-link/{ad.id}").json()
    assert data == {
        "share_url": f"https://market.example/share/ad/mesa-de-estudo-{ad.id}",
        "ad_title": "Mesa de estudo",
        "ad_price": "R$ 80,00",
    }


def test_generate_link_for_missing_or_malformed_ad(client):
    assert client.get(f"/share/generate-link/{MISSING_AD}").status_code == 404
    assert client.get("/share/generate-link/nope").status_code == 400


def test_shared_page_shows_ad_and_seller(client, session, users):
    users["alice"].contact = "(11) 99999-0000"
    session.add(users["alice"])
    session.commit()
    ad = make_ad(session, title="Desk <lamp>")

    response = client.get(f"/share/ad/desk-lamp-{ad.id}")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Desk &lt;lamp&gt;" in response.text
    assert "(11) 99999-0000" in response.text


def test_shared_page_errors(client):
    response = client.get(f"/share/ad/old-bike-{MISSING_AD}")
    assert response.status_code == 404
    assert "Ad not found" in response.text

    assert client.get("/share/ad/garbage").status_code == 400
