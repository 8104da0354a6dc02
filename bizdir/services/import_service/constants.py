"""Constants for business spreadsheet imports."""

# Ordered header aliases per business field, in normalised form (see
# mapping.normalize_header). Earlier aliases win when several columns match.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": (
        "name",
        "naam (zaak)",
        "naam zaak",
        "naam",
        "zaak",
        "business name",
        "business",
        "company",
        "bedrijf",
        "bedrijfsnaam",
    ),
    "street_name": (
        "streetname",
        "street_name",
        "street name",
        "address",
        "adresregel",
        "adresregel 1",
        "adres",
        "street",
        "straat",
    ),
    "zipcode": (
        "zipcode",
        "zip",
        "zip code",
        "postalcode",
        "postal_code",
        "postal code",
        "pc",
        "postcode",
    ),
    "city": (
        "city",
        "plaats",
        "woonplaats",
        "town",
        "stad",
    ),
    "email": (
        "email",
        "e-mail",
        "mail",
        "email address",
        "e-mailadres",
    ),
    "phone": (
        "phone",
        "telefoon",
        "tel",
        "telephone",
        "phone number",
        "telefoonnummer",
    ),
    "comment": (
        "comment",
        "opmerking",
        "comments",
        "opmerkingen",
        "notes",
        "note",
    ),
    "tags": (
        "tags",
        "(google) categorie",
        "categorie",
        "category",
        "categories",
    ),
    "is_active": (
        "isactive",
        "is_active",
        "active",
        "actief",
    ),
}

# Fields every imported row must provide, in reporting order
REQUIRED_IMPORT_FIELDS: tuple[str, ...] = ("name", "street_name", "zipcode", "city")

# Wire names used in error messages
FIELD_LABELS: dict[str, str] = {
    "name": "name",
    "street_name": "streetName",
    "zipcode": "zipcode",
    "city": "city",
}

TRUE_VALUES = {"yes", "y", "true", "1", "ja", "j", "on", "actief", "active"}
FALSE_VALUES = {"no", "n", "false", "0", "nee", "off", "inactief", "inactive"}

# File signatures used to sniff uploads
ZIP_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

# Delimiters recognised in CSV uploads
CSV_DELIMITERS = ",;\t"

# Default safety limit on rows read from one upload
MAX_ROWS = 5000
