# FileMaker Data API SDK Examples

# Each function below can be selected and run on its own. The main() call at
# the bottom runs them in order against a scratch record.

# Load requirements

import logging
import os

from dotenv import load_dotenv

from fmdata_sdk import APIError, ConnectionConfig, DataAPI, DateFormat, ScriptType, TokenExpired

# Load environnement from .env (FM_SERVER_URL, FM_DATABASE, FM_USERNAME, FM_PASSWORD, FM_LAYOUT)
load_dotenv()
logging.basicConfig(level=logging.INFO)

LAYOUT = os.getenv("FM_LAYOUT", "People")


def product_info(api: DataAPI):
    info = api.get_product_info()
    print("Server:", info.get("name"), info.get("version"))


def create_person(api: DataAPI) -> str:
    record_id = api.create_record(LAYOUT, {"Name": "John Doe", "Age": 30})
    print("Record created:", record_id)
    return record_id


def read_person(api: DataAPI, record_id: str):
    record = api.get_record(LAYOUT, record_id, date_format=DateFormat.ISO8601)
    print("Record:", record)


def list_people(api: DataAPI):
    records = api.get_records(LAYOUT, sort=[{"fieldName": "Name", "sortOrder": "ascend"}], limit=10)
    for record in records:
        print(record["recordId"], record["fieldData"])


def find_people(api: DataAPI):
    query = [
        {"fields": [{"fieldname": "Age", "fieldvalue": ">25"}]},
        {"fields": [{"fieldname": "Name", "fieldvalue": "Jeanne*"}], "options": {"omit": True}},
    ]
    result = api.find_records(LAYOUT, query, scripts=[{"type": ScriptType.PRESORT, "name": "Log Find"}])
    if isinstance(result, TokenExpired):
        print("Token expired during find, log in again")
        return
    print("Found", len(result), "records")


def update_person(api: DataAPI, record_id: str):
    record = api.get_record(LAYOUT, record_id)
    mod_id = api.edit_record(LAYOUT, record_id, {"Age": 31}, last_modification_id=record["modId"])
    print("Record updated, modId:", mod_id)


def delete_person(api: DataAPI, record_id: str):
    api.delete_record(LAYOUT, record_id)
    print("Record deleted:", record_id)


def main():
    config = ConnectionConfig.from_env()
    with DataAPI.from_config(config) as api:
        product_info(api)
        record_id = create_person(api)
        try:
            read_person(api, record_id)
            list_people(api)
            find_people(api)
            update_person(api, record_id)
        except APIError as e:
            print(f"Data API error {e.code}: {e.message}")
        finally:
            delete_person(api, record_id)


if __name__ == "__main__":
    main()
