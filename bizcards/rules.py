"""
Deterministic card rules.

Input column layout, output site domain and the city table live here so
the normalizer stays free of magic values.
"""

DEFAULT_DELIMITER = ";"  # regional Excel exports use semicolons
QUOTE = '"'

# surname; firstname + fathername; duty; address; phones; email; skype
RECORD_LENGTH = 7

WEBSITE_DOMAIN = "trakt.ru"

# Paragraph separator understood by the card template's text frames.
PARAGRAPH_BREAK = "\r"

# Ordered: first substring match wins.
# Moscow is intentionally missing so that its cards point at the site root.
CITY_CODES = (
    ("Архангельск", "arkhangelsk"),
    ("Астрахань", "astrakhan"),
    ("Балаково", "balakovo"),
    ("Благовещенск", "blagoveshensk"),
    ("Владивосток", "vladivostok"),
    ("Владимир", "vladimir"),
    ("Волгоград", "volgograd"),
    ("Волжский", "volzhsky"),
    ("Воронеж", "voronej"),
    ("Екатеринбург", "ekaterinburg"),
    ("Ижевск", "ijevsk"),
    ("Иркутск", "irkutsk"),
    ("Казань", "kazan"),
    ("Калуга", "kaluga"),
    ("Киров", "kirov"),
    ("Кострома", "kostroma"),
    ("Краснодар", "krasnodar"),
    ("Красноярск", "krasnoyarsk"),
    ("Липецк", "lipetsk"),
    ("Миасс", "miass"),
    ("Мурманск", "murmansk"),
    ("Набережные Челны", "chelny"),
    ("Нижневартовск", "nizhnevartovsk"),
    ("Нижний Новгород", "nnovgorod"),
    ("Новокузнецк", "novokuzneck"),
    ("Новороссийск", "novorossiysk"),
    ("Новосибирск", "novosibirsk"),
    ("Омск", "omsk"),
    ("Оренбург", "orenburg"),
    ("Орёл", "orel"),
    ("Пермь", "perm"),
    ("Петрозаводск", "petrozavodsk"),
    ("Ростов-на-Дону", "rostov"),
    ("Рязань", "ryazan"),
    ("Самара", "samara"),
    ("Санкт-Петербург", "peterburg"),
    ("Саратов", "saratov"),
    ("Смоленск", "smolensk"),
    ("Сочи", "sochi"),
    ("Ставрополь", "stavropol"),
    ("Сургут", "surgut"),
    ("Сыктывкар", "syktyvkar"),
    ("Тверь", "tver"),
    ("Тольятти", "togliatti"),
    ("Тула", "tula"),
    ("Тюмень", "tumen"),
    ("Ульяновск", "ulyanovsk"),
    ("Уфа", "ufa"),
    ("Челябинск", "chelyabinsk"),
    ("Череповец", "cherepovets"),
    ("Ярославль", "yaroslavl"),
)

# Template frame names.
FRAME_FULL_NAME = "ФИО"
FRAME_DUTY = "Должность"
FRAME_ADDRESS = "Адрес"
FRAME_CONTACTS = "Контакты"

OUTLINED_SUFFIX = " кривые"
