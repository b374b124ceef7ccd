from lakeshare.parameter_publisher import resource


def lambda_handler(event, context):
    return resource(event, context)
