"Get the next release version."

from nexttag.getversion import entrypoint


if __name__ == "__main__":
    entrypoint()
