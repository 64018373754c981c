from unittest.mock import MagicMock

import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError
from httplib2 import Response

from liftlog.errors import BackendFailure, Misconfigured, Unauthorized
from liftlog.sheets.client import SheetsClient

def http_error(status, body=b'{"error": {"message": "nope"}}'):
    return HttpError(Response({"status": str(status)}), body)

def make_client():
    service = MagicMock()
    return SheetsClient("ya29.token", "sheet-1", service=service), service.spreadsheets.return_value.values.return_value

def test_requires_spreadsheet_id_and_token():
    with pytest.raises(Misconfigured) as e:
        SheetsClient("ya29.token", "", service=MagicMock())
    assert e.value.missing == ["SPREADSHEET_ID"]
    with pytest.raises(Unauthorized):
        SheetsClient("", "sheet-1", service=MagicMock())

def test_read_tab_stringifies_cells():
    client, values = make_client()
    values.get.return_value.execute.return_value = {"values": [["SetId", "Reps"], ["s1", 5]]}
    assert client.read_tab("WorkoutSets") == [["SetId", "Reps"], ["s1", "5"]]
    kwargs = values.get.call_args.kwargs
    assert kwargs["range"] == "'WorkoutSets'!A1:ZZ"
    assert kwargs["spreadsheetId"] == "sheet-1"

def test_read_tabs_is_one_batch_call():
    client, values = make_client()
    values.batchGet.return_value.execute.return_value = {
        "valueRanges": [{"values": [["a"]]}, {}],
    }
    assert client.read_tabs(["One", "Two"]) == {"One": [["a"]], "Two": []}
    assert values.batchGet.call_count == 1

def test_append_rows():
    client, values = make_client()
    values.append.return_value.execute.return_value = {"updates": {}}
    client.append_rows("WorkoutSets", [["s1", "5"]])
    kwargs = values.append.call_args.kwargs
    assert kwargs["valueInputOption"] == "USER_ENTERED"
    assert kwargs["insertDataOption"] == "INSERT_ROWS"
    assert kwargs["body"] == {"values": [["s1", "5"]]}

def test_append_nothing_is_a_noop():
    client, values = make_client()
    assert client.append_rows("WorkoutSets", []) == {}
    values.append.assert_not_called()

def test_update_row_range():
    client, values = make_client()
    values.update.return_value.execute.return_value = {}
    client.update_row("WorkoutSets", 7, ["a", "b", "c"])
    assert values.update.call_args.kwargs["range"] == "'WorkoutSets'!A7:C7"

def test_update_cells_batches():
    client, values = make_client()
    values.batchUpdate.return_value.execute.return_value = {}
    client.update_cells("WorkoutSets", [(3, 18, "TRUE"), (4, 0, "")])
    data = values.batchUpdate.call_args.kwargs["body"]["data"]
    assert [d["range"] for d in data] == ["'WorkoutSets'!S3", "'WorkoutSets'!A4"]

def test_401_maps_to_unauthorized():
    client, values = make_client()
    values.get.return_value.execute.side_effect = http_error(401)
    with pytest.raises(Unauthorized):
        client.read_tab("WorkoutSets")

def test_other_errors_carry_status_and_payload():
    client, values = make_client()
    values.get.return_value.execute.side_effect = http_error(403)
    with pytest.raises(BackendFailure) as e:
        client.read_tab("WorkoutSets")
    assert e.value.status_code == 403
    payload = e.value.to_payload()
    assert payload["error"] == "backend_failure"
    assert payload["payload"] == {"error": {"message": "nope"}}

def test_non_json_error_body():
    client, values = make_client()
    values.get.return_value.execute.side_effect = http_error(500, b"<html>oops</html>")
    with pytest.raises(BackendFailure) as e:
        client.read_tab("WorkoutSets")
    assert e.value.status_code == 500
    assert "reason" in e.value.extra["payload"]

def test_refresh_error_is_unauthorized():
    client, values = make_client()
    values.get.return_value.execute.side_effect = RefreshError("expired")
    with pytest.raises(Unauthorized):
        client.read_tab("WorkoutSets")

def test_list_tabs():
    service = MagicMock()
    service.spreadsheets.return_value.get.return_value.execute.return_value = {
        "sheets": [{"properties": {"title": "WorkoutPlan"}}, {"properties": {"title": "WorkoutSets"}}],
    }
    client = SheetsClient("ya29.token", "sheet-1", service=service)
    assert client.list_tabs() == ["WorkoutPlan", "WorkoutSets"]
