DEFAULT_LICENSE = "all rights reserved"

LICENSES = {
    1: "CC BY-NC-SA",
    2: "CC BY-NC",
    3: "CC BY-NC-ND",
    4: "CC BY",
    5: "CC SA",
    6: "CC ND",
    7: "PD",
    8: "United States Government Work",
}


def decode_license(code) -> str:
    """
    Map a provider license code ("4", 4, None, ...) to a canonical string.
    Anything unknown is treated as all rights reserved.
    """
    try:
        key = int(str(code).strip())
    except (TypeError, ValueError):
        return DEFAULT_LICENSE
    return LICENSES.get(key, DEFAULT_LICENSE)
