# Overview: Change events emitted by the inventory core after commit.

from blinker import Namespace

_signals = Namespace()

# sender: the Flask app; kwargs: adjustment=StockAdjustment
stock_adjusted = _signals.signal("stock-adjusted")

# kwargs: category_id / supplier_id, store_id
category_removed = _signals.signal("category-removed")
supplier_removed = _signals.signal("supplier-removed")
