def shout(value):
    return str(value).upper()


def register(renderer):
    renderer.register_helper("shout", shout)
