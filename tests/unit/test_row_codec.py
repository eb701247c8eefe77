"""Unit tests for record/row conversion."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

import pytest
from pydantic import BaseModel, ConfigDict

from row_schema.core.config import MappingConfig
from row_schema.core.engine import SchemaEngine
from row_schema.core.enums import ForeignAction, TypeKind
from row_schema.core.exceptions import AccessError, ColumnValueError, InstantiationError
from row_schema.mapping.protocol import SequenceRowReader
from row_schema.mapping.spec import EntitySpec, FieldSpec, IndexSpec

# --- Test models ---


class Status(Enum):
    ACTIVE = "active"
    RETIRED = "retired"


@dataclass
class Author:
    id: int | None = None
    name: str = ""
    email: str | None = None
    status: Status = Status.ACTIVE
    born: datetime | None = None


Author.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="author",
    fields=[
        FieldSpec(attribute="id", declared_type=int, generated_id=True),
        FieldSpec(attribute="name", declared_type=str, nullable=False),
        FieldSpec(attribute="email", declared_type=str | None, unique=True),
        FieldSpec(attribute="status", declared_type=Status, nullable=False, default="ACTIVE"),
        FieldSpec(attribute="born", declared_type=datetime | None),
    ],
)


@dataclass
class Book:
    id: int | None = None
    title: str = ""
    edition: int = 1
    author: Author | None = None
    price: Decimal | None = None
    isbn: str = ""


Book.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="book",
    fields=[
        FieldSpec(attribute="id", declared_type=int, generated_id=True),
        FieldSpec(attribute="title", declared_type=str, nullable=False),
        FieldSpec(attribute="edition", declared_type=int, nullable=False, default="1"),
        FieldSpec(
            attribute="author",
            declared_type=Author,
            foreign=True,
            column="author_id",
            on_delete=ForeignAction.CASCADE,
        ),
        FieldSpec(attribute="price", declared_type=Decimal | None),
        FieldSpec(attribute="isbn", declared_type=str, nullable=False),
    ],
    indexes=[
        IndexSpec(name="ix_book_title_edition", fields=["title", "edition"], unique=True),
        IndexSpec(name="ix_book_isbn", fields=["isbn"], unique=True),
        IndexSpec(name="ix_book_author", fields=["author"]),
    ],
)


@dataclass(frozen=True)
class Note:
    id: int = 0
    text: str = ""


Note.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="note",
    fields=[
        FieldSpec(attribute="id", declared_type=int, id=True, nullable=False),
        FieldSpec(attribute="text", declared_type=str),
    ],
)


class Sparse:
    """Declares a field it never assigns."""

    def __init__(self) -> None:
        self.id = 1


Sparse.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="sparse",
    fields=[
        FieldSpec(attribute="id", declared_type=int, id=True),
        FieldSpec(attribute="label", declared_type=str),
    ],
)


class Owner:
    def __init__(self, id: int) -> None:
        self.id = id


Owner.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="owner", fields=[FieldSpec(attribute="id", declared_type=int, id=True)]
)


@dataclass
class Pet:
    id: int | None = None
    owner: Owner | None = None


Pet.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="pet",
    fields=[
        FieldSpec(attribute="id", declared_type=int, generated_id=True),
        FieldSpec(attribute="owner", declared_type=Owner, foreign=True, column="owner_id"),
    ],
)


class Person(BaseModel):
    id: int
    name: str


Person.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="person",
    fields=[
        FieldSpec(attribute="id", declared_type=int, id=True),
        FieldSpec(attribute="name", declared_type=str),
    ],
)


class FrozenPerson(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = 0
    name: str = ""


FrozenPerson.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="frozen_person",
    fields=[
        FieldSpec(attribute="id", declared_type=int, id=True),
        FieldSpec(attribute="name", declared_type=str),
    ],
)


class Member(BaseModel):
    id: int | None = None
    name: str = ""


Member.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="member",
    fields=[
        FieldSpec(attribute="id", declared_type=int, generated_id=True),
        FieldSpec(attribute="name", declared_type=str),
    ],
)


@dataclass
class Loan:
    id: int | None = None
    book: Book | None = None
    due: datetime | None = None


Loan.__entity__ = EntitySpec(  # type: ignore[attr-defined]
    name="loan",
    fields=[
        FieldSpec(attribute="id", declared_type=int, generated_id=True),
        FieldSpec(attribute="book", declared_type=Book | None, foreign=True, column="book_id"),
        FieldSpec(attribute="due", declared_type=datetime | None),
    ],
)


# --- Tests ---


class TestColumns:
    def test_all_columns(self, engine: SchemaEngine) -> None:
        assert engine.columns(Book) == {"id", "title", "edition", "author_id", "price", "isbn"}

    def test_without_id(self, engine: SchemaEngine) -> None:
        assert "id" not in engine.columns(Book, include_id=False)

    def test_without_foreign_keys(self, engine: SchemaEngine) -> None:
        assert engine.columns(Book, include_foreign_keys=False) == {
            "id", "title", "edition", "price", "isbn"
        }


class TestToRow:
    def test_omits_id_by_default(self, engine: SchemaEngine) -> None:
        row = engine.to_row(Author(id=3, name="Ann"))
        assert row == {
            "name": "Ann",
            "email": None,
            "status": "ACTIVE",
            "born": None,
        }

    def test_include_id(self, engine: SchemaEngine) -> None:
        assert engine.to_row(Author(id=3, name="Ann"), include_id=True)["id"] == 3

    def test_foreign_field_writes_linked_key(self, engine: SchemaEngine) -> None:
        book = Book(title="Dune", author=Author(id=9), price=Decimal("12.50"), isbn="x-1")
        row = engine.to_row(book)
        assert row["author_id"] == 9
        assert row["price"] == "12.50"
        assert row["edition"] == 1

    def test_missing_link_writes_null(self, engine: SchemaEngine) -> None:
        assert engine.to_row(Book(title="Dune"))["author_id"] is None

    def test_without_foreign_keys(self, engine: SchemaEngine) -> None:
        row = engine.to_row(Book(title="Dune"), include_foreign_keys=False)
        assert "author_id" not in row

    def test_explicit_columns(self, engine: SchemaEngine) -> None:
        assert engine.to_row(Book(id=4, title="Dune"), ["id", "title"]) == {
            "id": 4,
            "title": "Dune",
        }

    def test_fills_given_row(self, engine: SchemaEngine) -> None:
        row = {"extra": True}
        result = engine.to_row(Author(name="Ann"), ["name"], row=row)
        assert result is row
        assert row == {"extra": True, "name": "Ann"}

    def test_codec_rejection_names_column(self, engine: SchemaEngine) -> None:
        book = Book(title="Dune", edition="second")  # type: ignore[arg-type]
        with pytest.raises(ColumnValueError, match="edition") as exc_info:
            engine.to_row(book)
        assert exc_info.value.entity_name == "book"
        assert exc_info.value.column == "edition"

    def test_none_in_primitive_column(self, engine: SchemaEngine) -> None:
        book = Book(title="Dune", edition=None)  # type: ignore[arg-type]
        with pytest.raises(ColumnValueError, match="cannot store None"):
            engine.to_row(book)

    def test_unreadable_attribute(self, engine: SchemaEngine) -> None:
        with pytest.raises(AccessError, match="label") as exc_info:
            engine.to_row(Sparse())
        assert exc_info.value.entity_name == "sparse"


class TestFromRow:
    def test_round_trip(self, engine: SchemaEngine) -> None:
        author = Author(
            id=1,
            name="Ann",
            email="ann@example.com",
            status=Status.RETIRED,
            born=datetime(1970, 1, 2, 3, 4, 5),
        )
        row = engine.to_row(author, include_id=True)
        assert engine.load(row, Author) == author

    def test_populates_given_instance(self, engine: SchemaEngine) -> None:
        author = Author()
        result = engine.from_row({"id": 2, "name": "Bo"}, author)
        assert result is author
        assert (author.id, author.name) == (2, "Bo")

    def test_missing_columns_are_skipped(self, engine: SchemaEngine) -> None:
        author = engine.load({"name": "Cy"}, Author)
        assert author.name == "Cy"
        assert author.id is None
        assert author.status is Status.ACTIVE

    def test_explicit_columns(self, engine: SchemaEngine) -> None:
        author = engine.load({"id": 5, "name": "Di"}, Author, ["name"])
        assert author.name == "Di"
        assert author.id is None

    def test_primitive_null_reads_as_zero(self, engine: SchemaEngine) -> None:
        assert engine.load({"edition": None}, Book).edition == 0

    def test_foreign_key_creates_linked_record(self, engine: SchemaEngine) -> None:
        book = engine.load({"title": "Dune", "author_id": 9}, Book)
        assert isinstance(book.author, Author)
        assert book.author.id == 9
        assert book.author.name == ""

    def test_foreign_key_updates_existing_link(self, engine: SchemaEngine) -> None:
        author = Author(id=1, name="Ann")
        book = Book(author=author)
        engine.from_row({"author_id": 2}, book)
        assert book.author is author
        assert author.id == 2

    def test_null_foreign_key_leaves_link_empty(self, engine: SchemaEngine) -> None:
        assert engine.load({"author_id": None}, Book).author is None

    def test_sequence_row_reader(self, engine: SchemaEngine) -> None:
        reader = SequenceRowReader(["id", "name", "status"], (7, "Ed", "RETIRED"))
        author = engine.load(reader, Author)
        assert (author.id, author.name, author.status) == (7, "Ed", Status.RETIRED)

    def test_load_many(self, engine: SchemaEngine) -> None:
        authors = engine.load_many([{"id": 1}, {"id": 2}], Author)
        assert [a.id for a in authors] == [1, 2]

    def test_bad_column_value(self, engine: SchemaEngine) -> None:
        with pytest.raises(ColumnValueError, match="status"):
            engine.load({"status": "UNKNOWN"}, Author)

    def test_frozen_record(self, engine: SchemaEngine) -> None:
        with pytest.raises(AccessError, match="text") as exc_info:
            engine.from_row({"text": "hello"}, Note())
        assert exc_info.value.attribute == "text"

    def test_uncreatable_record(self, engine: SchemaEngine) -> None:
        with pytest.raises(InstantiationError, match="Owner"):
            engine.load({"id": 1}, Owner)

    def test_uncreatable_linked_record(self, engine: SchemaEngine) -> None:
        with pytest.raises(InstantiationError, match="foreign field 'owner'") as exc_info:
            engine.load({"owner_id": 3}, Pet)
        assert exc_info.value.type_name == "Owner"
        assert exc_info.value.entity_name == "pet"

    def test_sequence_reader_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="2 values for 3 columns"):
            SequenceRowReader(["a", "b", "c"], (1, 2))


class TestOptionalForeignField:
    def test_to_row(self, engine: SchemaEngine) -> None:
        assert engine.to_row(Loan(book=Book(id=4)))["book_id"] == 4
        assert engine.to_row(Loan())["book_id"] is None

    def test_load_creates_linked_record(self, engine: SchemaEngine) -> None:
        loan = engine.load({"book_id": 4}, Loan)
        assert isinstance(loan.book, Book)
        assert loan.book.id == 4


class TestTimestampDates:
    def test_naive_dates_round_trip(self) -> None:
        engine = SchemaEngine(MappingConfig(date_kind=TypeKind.DATE_AS_TIMESTAMP))
        loan = Loan(id=1, due=datetime(2020, 1, 1, 12, 0, 0, 500))
        columns = engine.columns(Loan, include_foreign_keys=False)

        row = engine.to_row(loan, columns)
        assert isinstance(row["due"], int)
        assert engine.from_row(row, Loan(), columns) == loan


class TestPydanticRecords:
    def test_round_trip(self, engine: SchemaEngine) -> None:
        member = Member(id=3, name="Ann")
        assert engine.load(engine.to_row(member, include_id=True), Member) == member

    def test_required_fields_block_instantiation(self, engine: SchemaEngine) -> None:
        with pytest.raises(InstantiationError, match="Person"):
            engine.load({"id": 1, "name": "a"}, Person)

    def test_existing_instance_is_filled(self, engine: SchemaEngine) -> None:
        person = engine.from_row({"id": 2, "name": "Bo"}, Person(id=1, name="a"))
        assert (person.id, person.name) == (2, "Bo")

    def test_frozen_model(self, engine: SchemaEngine) -> None:
        with pytest.raises(AccessError, match="frozen_person") as exc_info:
            engine.from_row({"id": 1, "name": "a"}, FrozenPerson())
        assert exc_info.value.attribute == "id"
