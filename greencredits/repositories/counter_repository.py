from pymongo import ReturnDocument


class CounterRepository:
    """
    Atomic sequences:
    counters: { _id: "reports", seq: 1004 }
    """

    def __init__(self, col):
        self.col = col

    async def next_value(self, key: str) -> int:
        doc = await self.col.find_one_and_update(
            {"_id": key},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["seq"])

    async def raise_to(self, key: str, value: int) -> None:
        # never moves a counter backwards
        await self.col.update_one(
            {"_id": key},
            {"$max": {"seq": value}},
            upsert=True,
        )
