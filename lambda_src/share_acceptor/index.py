from lakeshare.share_acceptor import resource


def lambda_handler(event, context):
    return resource(event, context)
