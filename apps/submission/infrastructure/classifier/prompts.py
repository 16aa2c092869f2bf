"""Receipt judgment prompt.

모델은 아래 JSON 객체 하나만 반환해야 한다.
"""

RECEIPT_VALIDATION_PROMPT = """\
Analyze the image provided. The image MUST satisfy all of the following criteria:
    1. It must be a photo of a purchase receipt.
    2. The receipt must show at least one sustainable purchase.
    3. The receipt must be readable and must not be a screenshot of another screen.
Please respond always and uniquely with the following JSON object as you are a REST API that returns the following object:
{
  "validityFactor": {validityFactorNumber}, // 0-1, 1 if it satisfies all the criteria, 0 otherwise
  "descriptionOfAnalysis": "{analysis}" // your analysis of the image and why it satisfies the criteria or not. It is shown to the user, so explain why the image does not qualify without listing the exact criteria.
}
"""
