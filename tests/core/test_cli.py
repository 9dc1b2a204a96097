import json

from docstruct.run_pipeline import main
from docstruct.utils.serialize import document_from_json


def test_cli_writes_structure_and_reading_order(tmp_path, capsys):
    records = [
        {
            "pageNumber": 1,
            "tokens": [
                {"text": "1. Introduction", "x": 72, "y": 700, "fontSize": 18, "bold": True},
                {"text": "Body text, see page 2.", "x": 72, "y": 650, "fontSize": 10},
            ],
        },
        {"pageNumber": 2, "tokens": [], "error": "unreadable"},
    ]
    input_path = tmp_path / "pages.json"
    input_path.write_text(json.dumps(records))
    output_path = tmp_path / "out.json"
    csv_path = tmp_path / "order.csv"

    exit_code = main([
        str(input_path),
        "--output", str(output_path),
        "--workers", "1",
        "--reading-order-csv", str(csv_path),
    ])

    assert exit_code == 0
    structure = document_from_json(output_path.read_text())
    assert [h.clean_text for h in structure.headings] == ["Introduction"]
    assert structure.statistics.errored_pages == 1
    assert csv_path.read_text().splitlines()[0] == "position,type,page_number,y,order,text"
    assert "Structure Summary" in capsys.readouterr().out
