"""
Utility functions
=================
.. moduleauthor:: Benjamin B. Ye <bye@caltech.edu>

This module contains a collection of utility functions used by other
MDMixture modules.
"""

from datetime import datetime
from typing import Any

def log(text: str) -> None:

    """
    Log information to console with the datetime prefixed.

    Parameters
    ----------
    text : `str`
        Message to log.
    """

    text = text.replace("\t", 4 * " ").replace("\n", f"\n{10 * ' '}")
    print(f"{datetime.now().strftime('%H:%M:%S')}  {text}")

def log_summary(title: str, items: dict[str, Any]) -> None:

    """
    Log a titled list of settings, one :code:`key: value` pair per
    line with the keys aligned.

    Parameters
    ----------
    title : `str`
        Heading of the summary.

    items : `dict`
        Settings to report, in order.
    """

    width = max((len(k) for k in items), default=0)
    log("\n".join([title, *(f"\t{k:<{width}} : {v}"
                            for k, v in items.items())]))
