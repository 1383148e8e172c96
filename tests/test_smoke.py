from fastapi.testclient import TestClient
from bizcards.main import app

client = TestClient(app)

CONTACTS = (
    "Иванов;Иван Иванович;Директор;г. Казань;+7 9161234567;Ivan@Example.com;ivanchik\r\n"
    "Петров;Пётр;инженер;г. Москва;8 (495) 123-45-67;petrov@example.com;\r\n"
)


def _upload(text: str, name: str = "contacts.csv", encoding: str = "utf-8"):
    return {"file": (name, text.encode(encoding), "text/csv")}


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_contacts_from_utf8_bom_upload():
    r = client.post("/contacts", files=_upload(CONTACTS, encoding="utf-8-sig"))
    assert r.status_code == 200

    data = r.json()
    assert data["summary"]["records"] == 2
    assert data["summary"]["columns"] == 7
    assert data["summary"]["encoding"] == "utf-8-sig"

    ivanov, petrov = data["contacts"]
    assert ivanov["surname"] == "Иванов"
    assert ivanov["email"] == "ivan@example.com"
    assert ivanov["phones"] == "+7 (916) 123-45-67"
    assert ivanov["website"] == "www.trakt.ru/kazan"
    assert petrov["duty"] == "Инженер"
    assert petrov["phones"] == "8 (495) 123-45-67"
    assert petrov["website"] == "www.trakt.ru"


def test_parse_detects_types():
    r = client.post("/parse", files=_upload("a;42;true;null;undefined\n"))
    assert r.status_code == 200
    assert r.json()["records"] == [["a", 42, True, None, None]]


def test_parse_relaxed_query_flag():
    text = "a;b\n\nc\n"
    assert client.post("/parse", files=_upload(text)).status_code == 422

    r = client.post("/parse", params={"relaxed": "true"}, files=_upload(text))
    assert r.status_code == 200
    assert r.json()["records"] == [["a", "b"], ["c"]]


def test_parse_error_detail():
    r = client.post("/contacts", files=_upload('Иванов;"Иван'))
    assert r.status_code == 422

    detail = r.json()["detail"]
    assert detail["kind"] == "UNEXPECTED_END_OF_FILE"
    assert detail["offset"] == 12


def test_parse_reports_warnings():
    r = client.post(
        "/parse",
        params={"ignore_quote_whitespace": "false"},
        files=_upload('a; "b"\n'),
    )
    assert r.status_code == 200
    data = r.json()
    assert data["summary"]["warnings"] == 1
    assert data["warnings"][0]["kind"] == "UNEXPECTED_WHITESPACE"


def test_cards():
    r = client.post("/cards", files=_upload(CONTACTS))
    assert r.status_code == 200

    first = r.json()["cards"][0]
    assert first["file_stem"] == "Иванов"
    assert first["frames"]["ФИО"] == "ИВАНОВ\rИван Иванович"
    assert first["right_aligned"] == ["Контакты"]


def test_rejects_non_csv_upload():
    r = client.post("/contacts", files=_upload(CONTACTS, name="contacts.txt"))
    assert r.status_code == 422


def test_website_domain_comes_from_settings(monkeypatch):
    from bizcards.settings import get_settings

    monkeypatch.setenv("WEBSITE_DOMAIN", "example.com")
    get_settings.cache_clear()
    try:
        r = client.post("/contacts", files=_upload(CONTACTS))
    finally:
        get_settings.cache_clear()

    assert r.status_code == 200
    assert r.json()["contacts"][0]["website"] == "www.example.com/kazan"


def test_contacts_from_cp1251_upload():
    text = (
        "Иванов;Иван Иванович;Директор по развитию;г. Казань, ул. Баумана, 5;8 916 123 45 67;ivan@example.com;ivanchik\r\n"
        "Петрова;Мария Сергеевна;Главный бухгалтер;г. Самара, ул. Ленина, 10;8 (846) 234-56-78;maria@example.com;\r\n"
    )
    r = client.post("/contacts", files=_upload(text, encoding="cp1251"))
    assert r.status_code == 200

    data = r.json()
    assert data["summary"]["encoding"].lower().replace("-", "") in ("cp1251", "windows1251")
    assert [c["surname"] for c in data["contacts"]] == ["Иванов", "Петрова"]
    assert data["contacts"][1]["duty"] == "Главный бухгалтер"
