"""In-memory stand-in for the AnkiConnect HTTP API."""

import json
from typing import Any

import httpx

ANKI_URL = "http://localhost:8765"


class FakeAnkiError(Exception):
    """Raised by an action handler; becomes an AnkiConnect error response."""


class FakeAnki:
    """Fake AnkiConnect service for httpx.MockTransport.

    Keeps decks, note types and notes in memory and records every action it
    receives. ``fail`` queues failures for an action: an exception instance is
    raised from the transport, an int becomes the HTTP status and a string is
    returned as the response error.
    """

    def __init__(self):
        self.decks: dict[str, int] = {"Default": 1}
        self.models: dict[str, dict[str, Any]] = {
            "Basic": {
                "fields": ["Front", "Back"],
                "templates": {
                    "Card 1": {"Front": "{{Front}}", "Back": "{{FrontSide}}<hr id=answer>{{Back}}"}
                },
                "css": ".card { font-family: arial; }",
            },
            "Cloze": {
                "fields": ["Text", "Back Extra"],
                "templates": {"Cloze": {"Front": "{{cloze:Text}}", "Back": "{{cloze:Text}}"}},
                "css": ".cloze { color: blue; }",
            },
        }
        self.notes: dict[int, dict[str, Any]] = {}
        self.next_id = 1000
        self.calls: list[str] = []
        self.requests: list[dict[str, Any]] = []
        self._failures: list[tuple[str, dict[str, Any] | None, object]] = []

    # Test helpers
    def fail(self, action: str, error: object, times: int = 1, when: dict | None = None) -> None:
        """Queue ``times`` failures for an action, optionally only for matching params."""
        for _ in range(times):
            self._failures.append((action, when, error))

    def count(self, action: str) -> int:
        return self.calls.count(action)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def add_model(self, name: str, fields: list[str]) -> None:
        self.models[name] = {
            "fields": fields,
            "templates": {"Card 1": {"Front": f"{{{{{fields[0]}}}}}", "Back": "{{FrontSide}}"}},
            "css": "",
        }

    # Transport
    def _take_failure(self, action: str, params: dict[str, Any]) -> object | None:
        for i, (failing_action, when, error) in enumerate(self._failures):
            if failing_action != action:
                continue
            if when and any(params.get(k) != v for k, v in when.items()):
                continue
            del self._failures[i]
            return error
        return None

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        action = body["action"]
        params = body.get("params") or {}
        self.calls.append(action)
        self.requests.append(body)

        failure = self._take_failure(action, params)
        if isinstance(failure, Exception):
            if isinstance(failure, httpx.RequestError):
                failure.request = request
            raise failure
        if isinstance(failure, int):
            return httpx.Response(failure, text="Internal Server Error")
        if failure is not None:
            return httpx.Response(200, json={"result": None, "error": str(failure)})

        handler = getattr(self, f"action_{action}", None)
        if handler is None:
            return httpx.Response(200, json={"result": None, "error": "unsupported action"})

        try:
            result = handler(**params)
        except FakeAnkiError as e:
            return httpx.Response(200, json={"result": None, "error": str(e)})
        return httpx.Response(200, json={"result": result, "error": None})

    # Actions
    def action_version(self):
        return 6

    def action_deckNames(self):
        return list(self.decks)

    def action_createDeck(self, deck):
        if deck not in self.decks:
            self.decks[deck] = len(self.decks) + 1
        return self.decks[deck]

    def action_modelNames(self):
        return list(self.models)

    def _model(self, modelName):
        if modelName not in self.models:
            raise FakeAnkiError(f"model was not found: {modelName}")
        return self.models[modelName]

    def action_modelFieldNames(self, modelName):
        return list(self._model(modelName)["fields"])

    def action_modelTemplates(self, modelName):
        return {k: dict(v) for k, v in self._model(modelName)["templates"].items()}

    def action_modelStyling(self, modelName):
        return {"css": self._model(modelName)["css"]}

    def action_createModel(self, modelName, inOrderFields, css, cardTemplates):
        if modelName in self.models:
            raise FakeAnkiError(f"Model name already exists: {modelName}")
        self.models[modelName] = {
            "fields": list(inOrderFields),
            "templates": {
                t["Name"]: {"Front": t["Front"], "Back": t["Back"]} for t in cardTemplates
            },
            "css": css,
        }
        return {"name": modelName}

    def action_addNote(self, note):
        if note["deckName"] not in self.decks:
            raise FakeAnkiError(f"deck was not found: {note['deckName']}")
        self._model(note["modelName"])
        for existing in self.notes.values():
            if existing["deckName"] == note["deckName"] and existing["fields"] == note["fields"]:
                raise FakeAnkiError("cannot create note because it is a duplicate")
        note_id = self.next_id
        self.next_id += 1
        self.notes[note_id] = {
            "noteId": note_id,
            "deckName": note["deckName"],
            "modelName": note["modelName"],
            "fields": dict(note["fields"]),
            "tags": list(note.get("tags", [])),
        }
        return note_id

    def action_addNotes(self, notes):
        ids = []
        for note in notes:
            try:
                ids.append(self.action_addNote(note))
            except FakeAnkiError:
                ids.append(None)
        return ids

    def action_findNotes(self, query):
        if query == "*":
            return list(self.notes)
        needle = query.lower()
        return [
            note_id
            for note_id, note in self.notes.items()
            if any(needle in value.lower() for value in note["fields"].values())
        ]

    def action_notesInfo(self, notes):
        result = []
        for note_id in notes:
            note = self.notes.get(note_id)
            if note is None:
                result.append({})
                continue
            result.append(
                {
                    "noteId": note_id,
                    "modelName": note["modelName"],
                    "tags": list(note["tags"]),
                    "fields": {
                        name: {"value": value, "order": order}
                        for order, (name, value) in enumerate(note["fields"].items())
                    },
                }
            )
        return result

    def action_updateNoteFields(self, note):
        if note["id"] not in self.notes:
            raise FakeAnkiError(f"Note was not found: {note['id']}")
        self.notes[note["id"]]["fields"].update(note["fields"])
        return None

    def action_updateNoteTags(self, note, tags):
        self.notes[note]["tags"] = list(tags)
        return None

    def action_deleteNotes(self, notes):
        for note_id in notes:
            self.notes.pop(note_id, None)
        return None

    def action_answerCards(self, answers):
        return [answer["cardId"] > 0 for answer in answers]
